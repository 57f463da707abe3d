"""Tests for ResponseOptimizationConfig."""
import pytest

from payloadopt.domains.response_optimization.aggregates import ResponseOptimizationConfig
from payloadopt.domains.response_optimization.value_objects import CompressionAlgorithm


class TestResponseOptimizationConfig:
    def test_defaults(self):
        config = ResponseOptimizationConfig.create_default()
        assert config.field_selection is True
        assert config.max_response_size == 10 * 1024 * 1024
        assert config.streaming.enabled is True
        assert config.streaming.chunk_size == 1000
        assert config.nested_max_depth == 5
        assert config.json_max_depth == 8

    def test_uncompressed(self):
        assert ResponseOptimizationConfig.create_uncompressed().compression.enabled is False

    def test_rejects_non_positive_max_size(self):
        with pytest.raises(ValueError, match="Maximum response size"):
            ResponseOptimizationConfig(max_response_size=0)

    def test_rejects_negative_depth(self):
        with pytest.raises(ValueError):
            ResponseOptimizationConfig(nested_max_depth=-1)

    def test_from_dict_merges_nested_sections(self):
        config = ResponseOptimizationConfig.from_dict({
            "compression": {"threshold": 2048, "algorithms": ["deflate"], "bogus": 1},
            "streaming": {"chunk_size": 50},
            "field_selection": False,
            "unknown": "ignored",
        })
        assert config.compression.threshold == 2048
        assert config.compression.level == 6
        assert config.compression.algorithms == (CompressionAlgorithm.DEFLATE,)
        assert config.streaming.chunk_size == 50
        assert config.streaming.enabled is True
        assert config.field_selection is False

    def test_from_dict_validates(self):
        with pytest.raises(ValueError):
            ResponseOptimizationConfig.from_dict({"compression": {"level": 42}})

    def test_to_dict_round_trip(self):
        config = ResponseOptimizationConfig.from_dict({"compression": {"threshold": 10}})
        assert ResponseOptimizationConfig.from_dict(config.to_dict()) == config
