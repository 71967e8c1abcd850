import copy

import pytest

from kubebind.core.errors import ConversionError, PathConflict
from kubebind.tree.pointer import get_at, parse_pointer, resolve, set_at


def deployment_tree():
    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "spec": {
            "template": {
                "metadata": {"annotations": {"team": "payments"}},
                "spec": {"containers": [{"name": "web"}]},
            }
        },
    }


@pytest.mark.parametrize("pointer, keys", [
    ("/spec/template", ["spec", "template"]),
    ("spec/template", ["spec", "template"]),
    ("/env", ["env"]),
    ("/a~1b/c~0d", ["a~1b", "c~0d"]),
    ("//x", ["", "x"]),
])
def test_parse_pointer(pointer, keys):
    """Only one leading slash is stripped and segments are used verbatim."""
    assert parse_pointer(pointer) == keys


def test_read_missing_yields_zero_values():
    tree = deployment_tree()
    assert get_at(tree, "/spec/template/spec/volumes", list) == []
    assert get_at(tree, "/metadata/annotations", dict) == {}
    assert get_at(tree, "/metadata/name", str) == ""


def test_read_through_scalar_is_not_found():
    tree = {"spec": {"template": "not-a-map"}}
    assert resolve(tree, "/spec/template/metadata") is None
    assert get_at(tree, "/spec/template/metadata/annotations", dict) == {}


def test_read_null_is_zero_value():
    tree = {"spec": {"volumes": None}}
    assert get_at(tree, "/spec/volumes", list) == []


def test_read_never_mutates_tree():
    tree = deployment_tree()
    snapshot = copy.deepcopy(tree)

    get_at(tree, "/spec/jobTemplate/spec/template/metadata/annotations", dict)
    annotations = get_at(tree, "/spec/template/metadata/annotations", dict)
    annotations["added"] = "later"

    assert tree == snapshot


def test_read_shape_mismatch_is_conversion_error():
    tree = {"spec": {"volumes": "oops"}}
    with pytest.raises(ConversionError):
        get_at(tree, "/spec/volumes", list)


def test_write_creates_every_missing_level():
    tree = {"kind": "CronJob"}
    set_at(tree, "/spec/jobTemplate/spec/template/metadata/annotations", {"a": "b"})

    assert tree == {
        "kind": "CronJob",
        "spec": {"jobTemplate": {"spec": {"template": {"metadata": {"annotations": {"a": "b"}}}}}},
    }


def test_write_replaces_null_intermediate():
    tree = {"spec": {"template": None}}
    set_at(tree, "/spec/template/spec/volumes", [])
    assert tree == {"spec": {"template": {"spec": {"volumes": []}}}}


def test_write_keeps_sibling_keys():
    tree = deployment_tree()
    set_at(tree, "/spec/template/spec/volumes", [{"name": "data"}])

    assert tree["spec"]["template"]["spec"]["containers"] == [{"name": "web"}]
    assert tree["spec"]["template"]["spec"]["volumes"] == [{"name": "data"}]


def test_write_replaces_existing_final_value():
    tree = {"metadata": {"annotations": "garbage"}}
    set_at(tree, "/metadata/annotations", {"k": "v"})
    assert tree == {"metadata": {"annotations": {"k": "v"}}}


def test_write_conflict_reports_key_and_partial_path():
    tree = {"spec": {"template": "not-a-map"}}
    snapshot = copy.deepcopy(tree)

    with pytest.raises(PathConflict) as exc:
        set_at(tree, "/spec/template/metadata/annotations", {})

    assert exc.value.key == "template"
    assert exc.value.path == ["spec"]
    assert tree == snapshot


def test_write_into_list_intermediate_conflicts():
    tree = {"spec": {"containers": [{"name": "web"}]}}
    with pytest.raises(PathConflict) as exc:
        set_at(tree, "/spec/containers/0/env", [])
    assert exc.value.key == "containers"


def test_write_on_scalar_root_conflicts():
    with pytest.raises(PathConflict):
        set_at("hello", "/env", [])


def test_written_value_is_detached_copy():
    tree = {}
    env = [{"name": "A", "value": "1"}]
    set_at(tree, "/env", env)
    env[0]["value"] = "2"
    env.append({"name": "B"})

    assert tree == {"env": [{"name": "A", "value": "1"}]}


def test_write_unsupported_kind_is_conversion_error():
    with pytest.raises(ConversionError):
        set_at({}, "/replicas", 3)
