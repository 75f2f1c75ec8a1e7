"""Typed read-only view over a canonical document tree."""
from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, model_serializer

NodeId = Union[StrictInt, StrictStr]


class ElementData(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str
    properties: Optional[Union[Dict[str, Any], List[Any]]] = None


class Node(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: NodeId
    data: ElementData
    children: List["Node"] = Field(default_factory=list)
    parent_id: Optional[NodeId] = Field(default=None, alias="parentId")

    @model_serializer(mode="wrap")
    def _drop_missing_parent(self, handler):
        payload = handler(self)
        for key in ("parentId", "parent_id"):
            if key in payload and payload[key] is None:
                del payload[key]
        return payload

    @property
    def id_key(self) -> str:
        return str(self.id)

    def walk(self, depth: int = 0) -> Iterator[tuple["Node", int]]:
        yield self, depth
        for child in self.children:
            yield from child.walk(depth + 1)

    def find(self, node_id: Any) -> Optional["Node"]:
        target = str(node_id)
        for node, _ in self.walk():
            if node.id_key == target:
                return node
        return None


class DocumentTree(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    root: Node
    status: str = "exported"
    next_node_id: int = Field(default=1, alias="nextNodeId", ge=1)
    exported_lookup_table: Dict[str, Any] = Field(default_factory=dict, alias="exportedLookupTable")

    def elements(self) -> List[Node]:
        return [node for node, depth in self.root.walk() if depth > 0]

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=False)
