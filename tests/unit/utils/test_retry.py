from __future__ import annotations

import asyncio

import pytest

from app.core.exceptions import PersistenceError, ValidationError
from app.utils.retry import RetryPolicy, call_with_retry


class _Flaky:
    def __init__(self, failures: int, exc: Exception) -> None:
        self.failures = failures
        self.exc = exc
        self.calls = 0

    def __call__(self, value: int) -> int:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.exc
        return value * 2


def test_retryable_errors_are_retried_until_success():
    func = _Flaky(failures=2, exc=PersistenceError("down"))
    result = asyncio.run(call_with_retry(func, 21, operation="test", max_retries=3, base_backoff_seconds=0))
    assert result == 42
    assert func.calls == 3


def test_retries_are_bounded():
    func = _Flaky(failures=10, exc=PersistenceError("down"))
    with pytest.raises(PersistenceError):
        asyncio.run(RetryPolicy(max_retries=2, base_backoff_seconds=0).run(func, 1, operation="test"))
    assert func.calls == 3


def test_non_retryable_errors_propagate_immediately():
    func = _Flaky(failures=1, exc=ValidationError("bad"))
    with pytest.raises(ValidationError):
        asyncio.run(call_with_retry(func, 1, operation="test", max_retries=3, base_backoff_seconds=0))
    assert func.calls == 1
