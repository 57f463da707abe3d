"""Tests for environment-driven optimizer configuration."""

import pytest

import payloadopt.config as config_module
from payloadopt.config import load_optimizer_config
from payloadopt.domains.response_optimization import CompressionAlgorithm


ENV_VARS = [
    "PAYLOADOPT_COMPRESSION_ENABLED",
    "PAYLOADOPT_COMPRESSION_THRESHOLD",
    "PAYLOADOPT_COMPRESSION_LEVEL",
    "PAYLOADOPT_COMPRESSION_ALGORITHMS",
    "PAYLOADOPT_FIELD_SELECTION",
    "PAYLOADOPT_MAX_RESPONSE_SIZE",
    "PAYLOADOPT_STREAMING_ENABLED",
    "PAYLOADOPT_STREAMING_CHUNK_SIZE",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.setattr(config_module, "_ENV_LOADED", True)
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_environment():
    cfg = load_optimizer_config()
    assert cfg.compression.enabled is True
    assert cfg.compression.threshold == 1024
    assert cfg.compression.level == 6
    assert cfg.compression.algorithms == (CompressionAlgorithm.GZIP, CompressionAlgorithm.DEFLATE)
    assert cfg.field_selection is True
    assert cfg.max_response_size == 10 * 1024 * 1024
    assert cfg.streaming.chunk_size == 1000


def test_environment_values_applied(monkeypatch):
    monkeypatch.setenv("PAYLOADOPT_COMPRESSION_ENABLED", "off")
    monkeypatch.setenv("PAYLOADOPT_COMPRESSION_THRESHOLD", "2048")
    monkeypatch.setenv("PAYLOADOPT_COMPRESSION_LEVEL", "9")
    monkeypatch.setenv("PAYLOADOPT_COMPRESSION_ALGORITHMS", "Deflate, gzip")
    monkeypatch.setenv("PAYLOADOPT_FIELD_SELECTION", "no")
    monkeypatch.setenv("PAYLOADOPT_MAX_RESPONSE_SIZE", "4096")
    monkeypatch.setenv("PAYLOADOPT_STREAMING_ENABLED", "false")
    monkeypatch.setenv("PAYLOADOPT_STREAMING_CHUNK_SIZE", "50")

    cfg = load_optimizer_config()

    assert cfg.compression.enabled is False
    assert cfg.compression.threshold == 2048
    assert cfg.compression.level == 9
    assert cfg.compression.algorithms == (CompressionAlgorithm.DEFLATE, CompressionAlgorithm.GZIP)
    assert cfg.field_selection is False
    assert cfg.max_response_size == 4096
    assert cfg.streaming.enabled is False
    assert cfg.streaming.chunk_size == 50


def test_overrides_win_over_environment(monkeypatch):
    monkeypatch.setenv("PAYLOADOPT_COMPRESSION_THRESHOLD", "2048")
    cfg = load_optimizer_config(compression_threshold=0, field_selection=False)
    assert cfg.compression.threshold == 0
    assert cfg.field_selection is False


def test_blank_variable_ignored(monkeypatch):
    monkeypatch.setenv("PAYLOADOPT_COMPRESSION_LEVEL", "  ")
    assert load_optimizer_config().compression.level == 6


@pytest.mark.parametrize(
    "name,value,message",
    [
        ("PAYLOADOPT_COMPRESSION_ENABLED", "maybe", "must be a boolean"),
        ("PAYLOADOPT_COMPRESSION_THRESHOLD", "lots", "must be an integer"),
        ("PAYLOADOPT_COMPRESSION_ALGORITHMS", " , ", "at least one algorithm"),
    ],
)
def test_malformed_variable_rejected(monkeypatch, name, value, message):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError, match=message) as exc:
        load_optimizer_config()
    assert name in str(exc.value)


def test_invalid_values_fail_validation(monkeypatch):
    monkeypatch.setenv("PAYLOADOPT_COMPRESSION_ALGORITHMS", "br")
    with pytest.raises(ValueError, match="Unknown compression algorithm"):
        load_optimizer_config()

    with pytest.raises(ValueError):
        load_optimizer_config(compression_level=12)
