"""
Dot-path helpers over attribute maps.
"""
from repokit.repository.attributes import (
    data_get,
    data_has,
    data_set,
    expand_dot_keys,
    forget,
    replace_recursive,
)


def test_data_get_reads_nested_maps_and_lists():
    data = {"profile": {"city": "Paris"}, "tags": ["a", "b"], "0": {"name": "Jean"}}
    assert data_get(data, "profile.city") == "Paris"
    assert data_get(data, "tags.1") == "b"
    assert data_get(data, "0.name") == "Jean"
    assert data_get(data, "profile.zip", "none") == "none"
    assert data_get(data, "tags.5") is None


def test_data_has_distinguishes_missing_from_none():
    data = {"remember_token": None}
    assert data_has(data, "remember_token")
    assert not data_has(data, "name")


def test_data_set_creates_intermediate_maps():
    data = {"name": "scalar"}
    data_set(data, "profile.address.city", "Lyon")
    data_set(data, "name.first", "Jean")
    assert data == {"name": {"first": "Jean"}, "profile": {"address": {"city": "Lyon"}}}


def test_data_set_indexes_lists():
    data = {"tags": ["a", "b"]}
    data_set(data, "tags.0", "z")
    data_set(data, "tags.2", "c")
    assert data["tags"] == ["z", "b", "c"]


def test_forget_returns_copy_without_paths():
    data = {"_token": "t", "user": {"name": "Jean", "email": "j@example.com"}}
    result = forget(data, ["_token", "user.email", "missing.key"])
    assert result == {"user": {"name": "Jean"}}
    assert data["_token"] == "t"
    assert "email" in data["user"]


def test_forget_removes_several_list_indexes():
    data = {"items": ["a", "b", "c", "d"]}
    assert forget(data, ["items.1", "items.2"]) == {"items": ["a", "d"]}


def test_expand_dot_keys_builds_tree():
    assert expand_dot_keys({"0.name": "Michel", "0.remember_token": "token", "page": 2}) == {
        "0": {"name": "Michel", "remember_token": "token"},
        "page": 2,
    }


def test_replace_recursive_merges_maps_and_override_wins_on_scalars():
    base = {"name": "Jean", "profile": {"city": "Paris", "zip": "75000"}}
    result = replace_recursive(base, {"profile": {"city": "Lyon"}, "role": "admin"})
    assert result == {"name": "Jean", "profile": {"city": "Lyon", "zip": "75000"}, "role": "admin"}
    assert base["profile"]["city"] == "Paris"


def test_replace_recursive_merges_lists_by_index():
    base = {"tags": ["a", "b", "c"]}
    assert replace_recursive(base, {"tags": {"1": "z"}}) == {"tags": ["a", "z", "c"]}
    assert replace_recursive(base, {"tags": ["x"]}) == {"tags": ["x", "b", "c"]}


def test_replace_recursive_scalar_replaced_by_map():
    assert replace_recursive({"a": 1}, {"a": {"b": 2}}) == {"a": {"b": 2}}


def test_forget_prefers_exact_dotted_key():
    data = {"a.b": 1, "a": {"b": 2}, "c": 3}
    assert forget(data, ["a.b"]) == {"a": {"b": 2}, "c": 3}
    assert forget({"a": {"b": 2}}, ["a.b"]) == {"a": {}}
