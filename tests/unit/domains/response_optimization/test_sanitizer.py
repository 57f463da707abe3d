"""Tests for TreeSanitizer."""
import pytest

from payloadopt.domains.response_optimization.sanitizer import TreeSanitizer
from payloadopt.domains.response_optimization.value_objects import (
    CIRCULAR_SENTINEL,
    MAX_DEPTH_SENTINEL,
    SanitizationPolicy,
)


def _contains(tree, needle):
    if tree == needle:
        return True
    if isinstance(tree, dict):
        return any(_contains(v, needle) for v in tree.values())
    if isinstance(tree, list):
        return any(_contains(v, needle) for v in tree)
    return False


@pytest.fixture
def sanitizer():
    return TreeSanitizer()


class TestSanitize:
    def test_scalars_pass_through_at_any_depth(self, sanitizer):
        assert sanitizer.sanitize(5, max_depth=0) == 5
        assert sanitizer.sanitize("s", max_depth=0) == "s"
        assert sanitizer.sanitize(None, max_depth=0) is None

    def test_copies_shallow_structure(self, sanitizer, nested_payload):
        result = sanitizer.sanitize(nested_payload, max_depth=10)
        assert result == nested_payload
        assert result is not nested_payload
        assert result["profile"] is not nested_payload["profile"]

    def test_depth_limit_replaces_containers(self, sanitizer):
        data = {"a": {"b": {"c": {"d": 1}}}}
        assert sanitizer.sanitize(data, max_depth=2) == {"a": {"b": MAX_DEPTH_SENTINEL}}

    def test_root_at_limit_is_replaced(self, sanitizer):
        assert sanitizer.sanitize({"a": 1}, max_depth=0) == MAX_DEPTH_SENTINEL

    def test_negative_depth_sentinelizes_immediately(self, sanitizer):
        assert sanitizer.sanitize([1, 2], max_depth=-1) == MAX_DEPTH_SENTINEL

    def test_current_depth_offsets_limit(self, sanitizer):
        assert sanitizer.sanitize({"a": {"b": 1}}, max_depth=2, current_depth=1) == {
            "a": MAX_DEPTH_SENTINEL
        }

    def test_cycle_terminates_with_sentinel(self, sanitizer, cyclic_payload):
        result = sanitizer.sanitize(cyclic_payload, max_depth=5)
        assert result["self"] == CIRCULAR_SENTINEL
        assert result["children"][0]["parent"] == CIRCULAR_SENTINEL
        assert _contains(result, CIRCULAR_SENTINEL)

    def test_list_cycle(self, sanitizer):
        items = [1]
        items.append(items)
        assert sanitizer.sanitize(items, max_depth=5) == [1, CIRCULAR_SENTINEL]

    def test_shared_siblings_are_not_circular(self, sanitizer, shared_sibling_payload):
        result = sanitizer.sanitize(shared_sibling_payload, max_depth=10)
        expected = {"value": 1, "inner": {"deep": True}}
        assert result == {"x": expected, "y": expected}
        assert not _contains(result, CIRCULAR_SENTINEL)

    def test_depth_checked_before_cycle(self, sanitizer, cyclic_payload):
        result = sanitizer.sanitize(cyclic_payload, max_depth=1)
        assert result["self"] == MAX_DEPTH_SENTINEL

    def test_tuple_becomes_list(self, sanitizer):
        assert sanitizer.sanitize((1, (2,)), max_depth=5) == [1, [2]]

    def test_policy_default_depth(self):
        sanitizer = TreeSanitizer(SanitizationPolicy(max_depth=1))
        assert sanitizer.sanitize({"a": {"b": 1}}) == {"a": MAX_DEPTH_SENTINEL}

    def test_very_deep_input_terminates(self, sanitizer):
        data = current = {}
        for _ in range(5000):
            current["next"] = {}
            current = current["next"]
        result = sanitizer.sanitize(data, max_depth=3)
        assert result == {"next": {"next": {"next": MAX_DEPTH_SENTINEL}}}
