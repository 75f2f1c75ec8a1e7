import json

from oxytree.tree.canonical import (
    assign_parent_ids,
    calculate_next_node_id,
    create_empty_tree,
    ensure_tree_integrity,
    generate_element_id,
    is_valid_tree_structure,
    regenerate_element_ids,
)


def _scenario_tree():
    return {
        "root": {
            "id": 1,
            "data": {"type": "root", "properties": None},
            "children": [
                {
                    "id": 100,
                    "data": {
                        "type": "EssentialElements\\Heading",
                        "properties": {"content": {"content": {"text": "Hi"}}},
                    },
                    "children": [],
                    "parentId": 1,
                }
            ],
        },
        "status": "exported",
    }


def test_scenario_sets_counter_and_lookup_table():
    tree = ensure_tree_integrity(_scenario_tree())
    assert tree["nextNodeId"] == 101
    assert tree["exportedLookupTable"] == {}
    assert json.dumps(tree["exportedLookupTable"]) == "{}"
    assert tree["status"] == "exported"


def test_canonicalization_is_idempotent():
    raw = {
        "root": {
            "id": "el-root",
            "data": {"type": "EssentialElements\\Root", "properties": []},
            "children": [{"id": "el-7", "data": {"type": "EssentialElements\\Div"}, "children": []}],
        }
    }
    once = ensure_tree_integrity(raw)
    assert ensure_tree_integrity(once) == once


def test_does_not_mutate_input():
    raw = _scenario_tree()
    ensure_tree_integrity(raw)
    assert "nextNodeId" not in raw


def test_namespaced_root_type_is_rewritten():
    for root_type in ("EssentialElements\\Root", "OxygenElements\\Root", "EssentialElements\\\\Root"):
        tree = ensure_tree_integrity({"root": {"id": 1, "data": {"type": root_type}, "children": []}})
        assert tree["root"]["data"]["type"] == "root"
        assert tree["root"]["data"]["properties"] is None


def test_other_root_types_are_left_alone():
    tree = ensure_tree_integrity({"root": {"id": 1, "data": {"type": "Root"}, "children": []}})
    assert tree["root"]["data"]["type"] == "Root"


def test_empty_root_properties_become_null():
    for properties in ({}, [], None):
        tree = ensure_tree_integrity({"root": {"id": 1, "data": {"type": "root", "properties": properties}, "children": []}})
        assert tree["root"]["data"]["properties"] is None


def test_non_empty_root_properties_are_kept():
    tree = ensure_tree_integrity({"root": {"id": 1, "data": {"type": "root", "properties": {"x": 1}}, "children": []}})
    assert tree["root"]["data"]["properties"] == {"x": 1}


def test_existing_counters_and_status_are_kept():
    raw = _scenario_tree()
    raw["nextNodeId"] = 500
    raw["status"] = "draft"
    tree = ensure_tree_integrity(raw)
    assert tree["nextNodeId"] == 500
    assert tree["status"] == "draft"

    legacy = _scenario_tree()
    legacy["_nextNodeId"] = 7
    tree = ensure_tree_integrity(legacy)
    assert tree["_nextNodeId"] == 7
    assert "nextNodeId" not in tree


def test_list_lookup_table_is_coerced_to_object():
    raw = _scenario_tree()
    raw["exportedLookupTable"] = []
    assert ensure_tree_integrity(raw)["exportedLookupTable"] == {}


def test_rootless_input_is_returned_unchanged():
    classic = [{"id": 1, "children": []}]
    assert ensure_tree_integrity(classic) is classic
    other = {"elements": []}
    assert ensure_tree_integrity(other) is other
    assert ensure_tree_integrity(None) is None


def test_next_node_id_uses_trailing_digits():
    tree = {
        "root": {
            "id": "el-root",
            "children": [
                {"id": "el-41", "children": [{"id": 7, "children": []}]},
                {"id": "12", "children": []},
                {"id": "el-abc", "children": []},
            ],
        }
    }
    assert calculate_next_node_id(tree) == 42


def test_next_node_id_floor_is_one():
    assert calculate_next_node_id(create_empty_tree()) == 1
    assert calculate_next_node_id({"root": {"id": 0, "children": []}}) == 1
    assert calculate_next_node_id({}) == 1


def test_empty_tree_composes_with_integrity_pass():
    empty = create_empty_tree()
    assert empty == {
        "root": {"id": "el-root", "data": {"type": "root", "properties": None}, "children": []},
        "nextNodeId": 1,
    }
    tree = ensure_tree_integrity(empty)
    assert tree["nextNodeId"] == 1
    assert tree["status"] == "exported"
    assert tree["exportedLookupTable"] == {}


def test_generate_element_id_format():
    element_id = generate_element_id()
    assert element_id.startswith("el-")
    assert len(element_id) == 11
    int(element_id[3:], 16)


def test_regenerate_element_ids_only_touches_strings():
    tree = {
        "root": {
            "id": "el-root",
            "children": [{"id": "el-00000001", "children": [{"id": 5, "children": []}]}],
        }
    }
    fresh = regenerate_element_ids(tree)
    assert fresh["root"]["id"] != "el-root"
    assert fresh["root"]["children"][0]["id"] != "el-00000001"
    assert fresh["root"]["children"][0]["children"][0]["id"] == 5
    assert tree["root"]["id"] == "el-root"


def test_assign_parent_ids_keeps_authored_links():
    tree = {
        "root": {
            "id": 1,
            "children": [
                {"id": 2, "children": [{"id": 3, "children": []}]},
                {"id": 4, "parentId": 99, "children": []},
                {"id": 5, "_parentId": 1, "children": []},
            ],
        }
    }
    linked = assign_parent_ids(tree)
    children = linked["root"]["children"]
    assert children[0]["parentId"] == 1
    assert children[0]["children"][0]["parentId"] == 2
    assert children[1]["parentId"] == 99
    assert "parentId" not in children[2]


def test_is_valid_tree_structure():
    assert is_valid_tree_structure({"root": {"id": 1, "children": []}})
    assert not is_valid_tree_structure({"root": {"id": 1}})
    assert not is_valid_tree_structure({"root": {"children": []}})
    assert is_valid_tree_structure([{"id": 1}])
    assert not is_valid_tree_structure([])
    assert not is_valid_tree_structure("tree")


def _chain(depth):
    root = {"id": 1, "data": {"type": "root", "properties": None}, "children": []}
    parent = root
    for offset in range(depth):
        node = {
            "id": 100 + offset,
            "data": {"type": "EssentialElements\\Div", "properties": None},
            "children": [],
            "parentId": parent["id"],
        }
        parent["children"].append(node)
        parent = node
    return {"root": root, "status": "exported"}


def test_large_numeric_string_ids_keep_precision():
    tree = _scenario_tree()
    tree["root"]["children"][0]["id"] = "9007199254740993"
    assert ensure_tree_integrity(tree)["nextNodeId"] == 9007199254740994


def test_decimal_string_ids_truncate():
    tree = {"root": {"id": 1, "children": [{"id": "12.9", "children": []}, {"id": "-3.5", "children": []}]}}
    assert calculate_next_node_id(tree) == 13


def test_unusable_ids_are_ignored():
    tree = {
        "root": {
            "id": 1,
            "children": [
                {"id": float("nan"), "children": []},
                {"id": float("inf"), "children": []},
                {"id": "el-" + "9" * 5000, "children": []},
                {"id": "9" * 5000, "children": []},
                {"id": 7.0, "children": []},
            ],
        }
    }
    assert calculate_next_node_id(tree) == 8
    assert ensure_tree_integrity(tree)["nextNodeId"] == 8


def test_deep_trees_are_canonicalized():
    raw = _chain(3000)
    tree = ensure_tree_integrity(raw)
    assert tree["nextNodeId"] == 3100
    assert "nextNodeId" not in raw
    assert tree["root"] is not raw["root"]


def test_root_data_is_copied_before_rewrite():
    raw = {"root": {"id": 1, "data": {"type": "EssentialElements\\Root", "properties": {}}, "children": []}}
    ensure_tree_integrity(raw)
    assert raw["root"]["data"] == {"type": "EssentialElements\\Root", "properties": {}}
