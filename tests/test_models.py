import pytest
from pydantic import ValidationError

from oxytree.models.document import DocumentTree, Node
from oxytree.models.issues import ValidationIssue, ValidationResult
from oxytree.tree.canonical import ensure_tree_integrity


def _tree():
    return {
        "root": {
            "id": 1,
            "data": {"type": "root", "properties": None},
            "children": [
                {
                    "id": 100,
                    "data": {"type": "EssentialElements\\Section", "properties": {"tag": "section"}},
                    "children": [
                        {
                            "id": 101,
                            "data": {"type": "EssentialElements\\Text", "properties": None},
                            "children": [],
                            "parentId": 100,
                        }
                    ],
                    "parentId": 1,
                }
            ],
        },
        "status": "exported",
    }


def test_issue_to_dict_includes_only_set_optionals():
    issue = ValidationIssue(code="missing_status", path="status", message="m", expected="string", example="exported")
    assert issue.to_dict() == {
        "code": "missing_status",
        "path": "status",
        "message": "m",
        "expected": "string",
        "example": "exported",
    }
    warning = ValidationIssue(code="parent_id_mismatch", path="p", message="m", expected=1, actual=None, action="a")
    payload = warning.to_dict()
    assert payload["actual"] is None
    assert payload["action"] == "a"
    assert "suggestions" not in payload


def test_issue_rejects_unknown_fields():
    with pytest.raises(ValidationError):
        ValidationIssue(code="c", path="p", message="m", severity="high")


def test_result_counts():
    issue = ValidationIssue(code="c", path="p", message="m")
    result = ValidationResult(errors=[issue], warnings=[issue, issue])
    assert result.valid is False
    assert result.error_count == 1
    assert result.warning_count == 2
    dumped = result.model_dump()
    assert dumped["valid"] is False
    assert ValidationResult().valid is True


def test_document_tree_view():
    doc = DocumentTree.model_validate(ensure_tree_integrity(_tree()))
    assert doc.next_node_id == 102
    assert [node.id for node in doc.elements()] == [100, 101]
    assert doc.root.find("101").parent_id == 100
    assert doc.root.find(999) is None


def test_document_tree_to_dict_uses_wire_names():
    payload = DocumentTree.model_validate(ensure_tree_integrity(_tree())).to_dict()
    assert payload["nextNodeId"] == 102
    assert payload["exportedLookupTable"] == {}
    assert "parentId" not in payload["root"]
    child = payload["root"]["children"][0]
    assert child["parentId"] == 1
    assert child["data"]["properties"] == {"tag": "section"}


def test_node_accepts_string_ids_and_extra_keys():
    node = Node.model_validate(
        {"id": "el-abc", "data": {"type": "EssentialElements\\Div", "properties": [], "custom": 1}, "_parentId": 1}
    )
    assert node.id_key == "el-abc"
    assert node.data.model_extra == {"custom": 1}


def test_next_node_id_must_be_positive():
    tree = ensure_tree_integrity(_tree())
    tree["nextNodeId"] = 0
    with pytest.raises(ValidationError):
        DocumentTree.model_validate(tree)
