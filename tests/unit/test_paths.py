from oxytree.utils.paths import get_nested, has_nested, parse_path, set_nested


def test_get_nested_walks_mappings():
    obj = {"a": {"b": {"c": 3}}}
    assert get_nested(obj, ["a", "b", "c"]) == 3
    assert get_nested(obj, "a.b.c") == 3


def test_get_nested_missing_returns_default():
    obj = {"a": {"b": "leaf"}}
    assert get_nested(obj, "a.x") is None
    assert get_nested(obj, "a.b.c", default="nope") == "nope"


def test_has_nested_counts_none_leaf():
    obj = {"a": {"b": None}}
    assert has_nested(obj, "a.b")
    assert not has_nested(obj, "a.c")


def test_set_nested_creates_and_replaces_intermediates():
    obj = {"a": "scalar"}
    set_nested(obj, "a.b.c", 1)
    assert obj == {"a": {"b": {"c": 1}}}


def test_parse_path_skips_empty_segments():
    assert parse_path("a..b.") == ["a", "b"]
    assert parse_path(("x", "y")) == ["x", "y"]
