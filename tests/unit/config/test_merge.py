"""
ai-dev-workflow - unit tests for the deep merge engine

File: tests/unit/config/test_merge.py

Purpose
- Validate overlay semantics used by config sync, ``init`` and module composition.

What this test file should cover
- Null tombstones delete keys.
- List concatenation, nested recursion and scalar replacement.
- Non-mapping short-circuits.
- Purity: inputs are never mutated and the result shares no containers.
- Property coverage with hypothesis for the rules above.
"""

from __future__ import annotations

import copy

from hypothesis import given, settings
from hypothesis import strategies as st

from ai_dev_workflow.config.merge import merge_all, merge_documents

_KEYS = st.text(alphabet="abcdef", min_size=1, max_size=3)
_SCALARS = st.one_of(st.none(), st.integers(), st.text(max_size=5), st.booleans())
_DOCUMENTS = st.recursive(
    _SCALARS,
    lambda children: st.one_of(
        st.lists(children, max_size=3),
        st.dictionaries(_KEYS, children, max_size=3),
    ),
    max_leaves=10,
)
_MAPPINGS = st.dictionaries(_KEYS, _DOCUMENTS, max_size=4)


def test_null_overlay_value_deletes_key() -> None:
    assert merge_documents({"a": 1, "b": 2}, {"a": None}) == {"b": 2}


def test_null_for_missing_key_is_a_no_op() -> None:
    assert merge_documents({"a": 1}, {"z": None}) == {"a": 1}


def test_lists_concatenate_base_then_overlay() -> None:
    assert merge_documents({"a": [1, 2]}, {"a": [3]}) == {"a": [1, 2, 3]}


def test_list_overlay_replaces_non_list_base() -> None:
    assert merge_documents({"a": "x"}, {"a": [1]}) == {"a": [1]}


def test_nested_mappings_merge_recursively() -> None:
    base = {"a": {"b": 1, "c": 2}}
    overlay = {"a": {"c": 3, "d": 4}}

    assert merge_documents(base, overlay) == {"a": {"b": 1, "c": 3, "d": 4}}


def test_nested_tombstone_deletes_inner_key() -> None:
    assert merge_documents({"a": {"b": 1, "c": 2}}, {"a": {"b": None}}) == {"a": {"c": 2}}


def test_mapping_overlay_replaces_scalar_base() -> None:
    assert merge_documents({"a": 5}, {"a": {"b": 1}}) == {"a": {"b": 1}}


def test_non_mapping_base_returns_overlay() -> None:
    assert merge_documents(None, {"a": 1}) == {"a": 1}
    assert merge_documents([1, 2], {"a": 1}) == {"a": 1}


def test_non_mapping_overlay_returns_base() -> None:
    assert merge_documents({"a": 1}, None) == {"a": 1}
    assert merge_documents({"a": 1}, "text") == {"a": 1}


def test_merge_all_folds_left_to_right() -> None:
    layers = [{"a": 1, "tags": ["x"]}, {"a": 2, "tags": ["y"]}, {"b": 3, "a": None}]

    assert merge_all(layers) == {"tags": ["x", "y"], "b": 3}
    assert merge_all([]) is None


def test_inputs_are_not_mutated_and_result_is_independent() -> None:
    base = {"a": {"list": [1]}, "keep": {"x": 1}}
    overlay = {"a": {"list": [2]}}
    base_before = copy.deepcopy(base)
    overlay_before = copy.deepcopy(overlay)

    merged = merge_documents(base, overlay)
    merged["keep"]["x"] = 99
    merged["a"]["list"].append(3)

    assert base == base_before
    assert overlay == overlay_before


@settings(max_examples=75, deadline=None)
@given(base=_MAPPINGS, overlay=_MAPPINGS)
def test_property_overlay_keys_follow_merge_rules(
    base: dict[str, object], overlay: dict[str, object]
) -> None:
    merged = merge_documents(base, overlay)

    for key, value in overlay.items():
        if value is None:
            assert key not in merged
        elif isinstance(value, list) and isinstance(base.get(key), list):
            assert merged[key] == [*base[key], *value]
        elif not isinstance(value, (list, dict)):
            assert merged[key] == value
    for key, value in base.items():
        if key not in overlay:
            assert merged[key] == value


@settings(max_examples=50, deadline=None)
@given(document=_MAPPINGS)
def test_property_empty_overlay_is_identity(document: dict[str, object]) -> None:
    assert merge_documents(document, {}) == document
    assert merge_documents({}, document) == {
        key: value for key, value in document.items() if value is not None
    }
