from __future__ import annotations

import pytest

from stencil.naming import capitalize, is_qualified, split_qualified, to_file, to_ns


@pytest.mark.parametrize(
    "value, expected",
    [
        ("acme/cool_lib", "acme.cool-lib"),
        ("org/corfield/new", "org.corfield.new"),
        ("plain", "plain"),
    ],
)
def test_to_ns(value, expected):
    assert to_ns(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        ("acme.cool-lib", "acme/cool_lib"),
        ("stencil.templates/lib", "stencil/templates/lib"),
        ("plain", "plain"),
    ],
)
def test_to_file(value, expected):
    assert to_file(value) == expected


@pytest.mark.parametrize("value", ["a/b_c", "x_y/z", "top/mid/leaf", "snake_case"])
def test_file_form_inverts_namespace_form(value):
    assert to_file(to_ns(value)) == value


@pytest.mark.parametrize("value", ["a.b-c", "x-y.z", "top.mid.leaf"])
def test_namespace_form_inverts_file_form(value):
    assert to_ns(to_file(value)) == value


def test_transforms_coerce_non_strings():
    assert to_ns(12) == "12"
    assert to_file(1.5) == "1/5"


@pytest.mark.parametrize(
    "key, expected",
    [("artifact/id", True), ("main", False), ("/main", False), ("main/", False)],
)
def test_is_qualified(key, expected):
    assert is_qualified(key) is expected


def test_split_qualified():
    assert split_qualified("acme/demo") == ("acme", "demo")
    assert split_qualified("demo") == ("demo", "demo")


def test_capitalize():
    assert capitalize("sean") == "Sean"
    assert capitalize("JANE") == "Jane"
    assert capitalize("   ") == ""
