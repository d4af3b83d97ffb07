"""Tests for the async retry decorator"""
import pytest
from unittest.mock import AsyncMock, patch

import httpx

from utils.retry import async_retry


class TestAsyncRetry:

    @pytest.mark.asyncio
    async def test_returns_first_success(self):
        calls = []

        @async_retry(max_attempts=3)
        async def succeed():
            calls.append(1)
            return "ok"

        assert await succeed() == "ok"
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_retries_then_succeeds(self):
        attempts = {"n": 0}

        @async_retry(max_attempts=3, backoff_factor=2.0, exceptions=(httpx.TransportError,))
        async def flaky():
            attempts["n"] += 1
            if attempts["n"] < 3:
                raise httpx.ConnectError("connection refused")
            return "done"

        with patch("utils.retry.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            assert await flaky() == "done"

        assert attempts["n"] == 3
        # backoff_factor ** attempt
        assert [c.args[0] for c in mock_sleep.call_args_list] == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_reraises_after_last_attempt(self):
        @async_retry(max_attempts=2, exceptions=(httpx.TransportError,))
        async def always_fails():
            raise httpx.ReadTimeout("timed out")

        with patch("utils.retry.asyncio.sleep", new_callable=AsyncMock):
            with pytest.raises(httpx.ReadTimeout):
                await always_fails()

    @pytest.mark.asyncio
    async def test_other_exceptions_are_not_retried(self):
        attempts = {"n": 0}

        @async_retry(max_attempts=3, exceptions=(httpx.TransportError,))
        async def bad_input():
            attempts["n"] += 1
            raise ValueError("bad")

        with pytest.raises(ValueError):
            await bad_input()
        assert attempts["n"] == 1
