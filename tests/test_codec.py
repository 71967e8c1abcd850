#!/usr/bin/env python3
"""
KUBEBIND CODEC SUITE
--------------------
Structured resource <-> generic tree: scalar normalization of
round-trip YAML values, rejection of shapes a tree cannot hold, and
write-back that keeps the resource's own scalar objects.
"""

import datetime

import pytest
from ruamel.yaml import YAML

from kubebind.core.errors import ConversionError
from kubebind.tree.codec import from_tree, to_tree

DOC = (
    "metadata:\n"
    "  labels:\n"
    "    released: 2024-01-01\n"
    "    stamped: 2024-01-01T10:30:00Z\n"
    "    enabled: true\n"
    "    replicas: 3\n"
)


def load_rt(text):
    yaml = YAML(typ='rt')
    return yaml.load(text)


def test_timestamps_become_iso_strings():
    tree = to_tree(load_rt(DOC))
    labels = tree["metadata"]["labels"]

    assert labels["released"] == "2024-01-01"
    assert labels["stamped"].startswith("2024-01-01T10:30:00")
    assert labels["enabled"] is True
    assert labels["replicas"] == 3
    assert type(labels["replicas"]) is int


def test_write_back_keeps_original_scalar_objects():
    resource = load_rt(DOC)
    released = resource["metadata"]["labels"]["released"]

    tree = to_tree(resource)
    tree["metadata"]["labels"]["team"] = "payments"
    from_tree(tree, resource)

    labels = resource["metadata"]["labels"]
    assert labels["released"] is released
    assert isinstance(labels["released"], datetime.date)
    assert labels["team"] == "payments"


def test_plain_dates_are_normalized():
    tree = to_tree({"spec": {"since": datetime.date(2024, 1, 1)}})
    assert tree == {"spec": {"since": "2024-01-01"}}


@pytest.mark.parametrize("resource", [
    {"spec": {"nodeSelector": {1: "x"}}},
    {"spec": {(1, 2): "pair"}},
    {"spec": {None: "nothing"}},
])
def test_non_string_keys_are_rejected(resource):
    with pytest.raises(ConversionError) as exc:
        to_tree(resource)
    assert "Non-string key" in str(exc.value)


def test_non_string_keys_from_yaml_are_rejected():
    with pytest.raises(ConversionError):
        to_tree(load_rt("spec:\n  nodeSelector:\n    1: x\n"))


@pytest.mark.parametrize("value", [float("inf"), float("nan"), {"a"}, object()])
def test_unrepresentable_values_are_rejected(value):
    with pytest.raises(ConversionError):
        to_tree({"metadata": {"weight": value}})


def test_tree_is_detached_from_resource():
    resource = {"spec": {"containers": [{"name": "web"}]}}
    tree = to_tree(resource)
    tree["spec"]["containers"][0]["name"] = "api"

    assert resource["spec"]["containers"][0]["name"] == "web"
