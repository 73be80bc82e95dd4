"""Tests for retry and executor helpers."""
import asyncio
import time

import pytest
from routeros_sync.utils.connection import (
    with_retry,
    run_blocking,
    RETRYABLE_EXCEPTIONS,
)


class TestWithRetry:
    """Tests for retry decorator."""

    @pytest.mark.asyncio
    async def test_async_success_no_retry(self):
        """Successful async function doesn't retry."""
        call_count = 0

        @with_retry(max_attempts=3)
        async def succeeding_func():
            nonlocal call_count
            call_count += 1
            return "success"

        result = await succeeding_func()
        assert result == "success"
        assert call_count == 1

    @pytest.mark.asyncio
    async def test_async_retry_then_success(self):
        """Async function retries on failure then succeeds."""
        call_count = 0

        @with_retry(max_attempts=3, min_wait=0.01, max_wait=0.1)
        async def failing_then_succeeding():
            nonlocal call_count
            call_count += 1
            if call_count < 2:
                raise ConnectionRefusedError("Connection refused")
            return "success"

        result = await failing_then_succeeding()
        assert result == "success"
        assert call_count == 2

    @pytest.mark.asyncio
    async def test_async_max_retries_exceeded(self):
        """Async function raises after max retries."""
        call_count = 0

        @with_retry(max_attempts=3, min_wait=0.01, max_wait=0.1)
        async def always_failing():
            nonlocal call_count
            call_count += 1
            raise TimeoutError("Always times out")

        with pytest.raises(TimeoutError):
            await always_failing()
        assert call_count == 3

    def test_sync_retry_then_success(self):
        """Sync function retries on failure then succeeds."""
        call_count = 0

        @with_retry(max_attempts=3, min_wait=0.01, max_wait=0.1)
        def flaky_dial():
            nonlocal call_count
            call_count += 1
            if call_count < 3:
                raise ConnectionResetError("reset by peer")
            return "connected"

        assert flaky_dial() == "connected"
        assert call_count == 3

    @pytest.mark.asyncio
    async def test_non_retryable_exception(self):
        """Non-retryable exceptions are not retried."""
        call_count = 0

        @with_retry(max_attempts=3, exceptions=(ConnectionRefusedError,))
        async def raising_value_error():
            nonlocal call_count
            call_count += 1
            raise ValueError("Not retryable")

        with pytest.raises(ValueError):
            await raising_value_error()
        assert call_count == 1  # Only one attempt


class TestRetryableExceptions:
    """Tests for retryable exceptions list."""

    def test_connection_refused_is_retryable(self):
        """ConnectionRefusedError is retryable."""
        assert ConnectionRefusedError in RETRYABLE_EXCEPTIONS

    def test_timeout_is_retryable(self):
        """TimeoutError is retryable."""
        assert TimeoutError in RETRYABLE_EXCEPTIONS

    def test_os_error_is_retryable(self):
        """OSError is retryable."""
        assert OSError in RETRYABLE_EXCEPTIONS


class TestRunBlocking:
    """Tests for the executor helper."""

    @pytest.mark.asyncio
    async def test_returns_result(self):
        """Result of the blocking call is returned."""
        assert await run_blocking(lambda: 42) == 42

    @pytest.mark.asyncio
    async def test_propagates_exception(self):
        """Exceptions from the blocking call reach the caller."""
        def boom():
            raise OSError("dial failed")

        with pytest.raises(OSError):
            await run_blocking(boom)

    @pytest.mark.asyncio
    async def test_deadline(self):
        """A call exceeding its deadline raises TimeoutError for the caller."""
        with pytest.raises(asyncio.TimeoutError):
            await run_blocking(lambda: time.sleep(0.5), timeout=0.05)
