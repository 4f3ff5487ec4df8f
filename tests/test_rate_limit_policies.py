"""Tests for the operation-class rate limit table and config model."""

import dataclasses

import pytest

from complaintdesk.app.rate_limit import (
    RATE_LIMITS,
    OperationType,
    RateLimitConfig,
    get_rate_limit_config,
)


class TestRateLimitTable:
    """Tests for the static per-class configuration."""

    @pytest.mark.parametrize(
        ("operation", "max_requests"),
        [
            ("read", 100),
            ("write", 30),
            ("bulk", 10),
            ("auth", 20),
            ("search", 50),
            ("upload", 20),
        ],
    )
    def test_limits_per_operation_type(self, operation, max_requests):
        config = get_rate_limit_config(operation)

        assert config.max_requests == max_requests
        assert config.window_ms == 60000
        assert config.retry_after_ms is None

    def test_covers_every_operation_type(self):
        assert set(RATE_LIMITS) == set(OperationType)

    def test_read_more_permissive_than_write_than_bulk(self):
        read = RATE_LIMITS[OperationType.READ].max_requests
        write = RATE_LIMITS[OperationType.WRITE].max_requests
        bulk = RATE_LIMITS[OperationType.BULK].max_requests

        assert read > write > bulk

    def test_accepts_enum_member(self):
        assert get_rate_limit_config(OperationType.SEARCH) is RATE_LIMITS[OperationType.SEARCH]

    def test_unknown_operation_type(self):
        with pytest.raises(ValueError, match="expected one of"):
            get_rate_limit_config("delete")

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            RATE_LIMITS[OperationType.READ] = RateLimitConfig(1, 1)


class TestRateLimitConfig:
    """Tests for config validation."""

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_requests": 0, "window_ms": 60000},
            {"max_requests": 10, "window_ms": 0},
            {"max_requests": -1, "window_ms": 60000},
            {"max_requests": 10, "window_ms": 60000, "retry_after_ms": 0},
        ],
    )
    def test_rejects_non_positive_values(self, kwargs):
        with pytest.raises(ValueError):
            RateLimitConfig(**kwargs)

    def test_ms_per_token(self):
        assert RateLimitConfig(max_requests=30, window_ms=60000).ms_per_token == 2000

    def test_is_immutable(self):
        config = RateLimitConfig(max_requests=30, window_ms=60000)

        with pytest.raises(dataclasses.FrozenInstanceError):
            config.max_requests = 31
