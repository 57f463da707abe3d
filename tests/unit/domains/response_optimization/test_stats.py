"""Tests for CompressionStats."""
import threading

import pytest

from payloadopt.domains.response_optimization.compression import CompressionEngine
from payloadopt.domains.response_optimization.stats import CompressionStats


class TestCompressionStats:
    def test_starts_at_zero(self):
        snapshot = CompressionStats().snapshot()
        assert snapshot == {
            "requests": 0,
            "compressed": 0,
            "bytesOriginal": 0,
            "bytesCompressed": 0,
            "avgCompressionRatio": 0.0,
            "compressionRate": 0,
            "avgSavings": 0,
        }

    def test_aggregate_ratio_not_average_of_ratios(self):
        stats = CompressionStats()
        stats.record_attempt()
        stats.record_success(1000, 500)   # 50%
        stats.record_attempt()
        stats.record_success(3000, 300)   # 90%
        # (4000 - 800) / 4000, not (0.5 + 0.9) / 2
        assert stats.avg_compression_ratio == pytest.approx(0.8)

    def test_derived_values(self):
        stats = CompressionStats()
        for _ in range(4):
            stats.record_attempt()
        stats.record_success(1000, 400)
        snapshot = stats.get_stats()
        assert snapshot["compressionRate"] == pytest.approx(25.0)
        assert snapshot["avgSavings"] == pytest.approx(600.0)

    def test_reset(self):
        stats = CompressionStats()
        stats.record_attempt()
        stats.record_success(100, 50)
        stats.reset()
        assert (stats.requests, stats.compressed, stats.bytes_original, stats.bytes_compressed) == (
            0, 0, 0, 0,
        )
        assert stats.avg_compression_ratio == 0.0

    def test_requests_never_below_compressed(self, large_payload):
        stats = CompressionStats()
        engine = CompressionEngine(stats=stats)
        for hint in ("gzip", "br", "deflate", "gzip"):
            engine.compress_sync(large_payload, hint)
        assert stats.compressed == 3
        assert stats.requests == 4
        assert stats.requests >= stats.compressed

    def test_concurrent_updates_are_not_lost(self):
        stats = CompressionStats()

        def worker():
            for _ in range(1000):
                stats.record_attempt()
                stats.record_success(10, 4)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert stats.requests == 8000
        assert stats.compressed == 8000
        assert stats.bytes_original == 80000
        assert stats.bytes_compressed == 32000
        assert stats.avg_compression_ratio == pytest.approx(0.6)
