import asyncio

import pytest

from classy_weather.weather.cancellation import CancelToken
from classy_weather.weather.errors import RequestCancelled


class TestCancelToken:
    """Test cases for the CancelToken class."""

    @pytest.mark.asyncio
    async def test_run_returns_result(self):
        async def request():
            return 42

        assert await CancelToken().run(request()) == 42

    @pytest.mark.asyncio
    async def test_run_propagates_errors(self):
        async def request():
            raise ValueError("bad")

        with pytest.raises(ValueError, match="bad"):
            await CancelToken().run(request())

    @pytest.mark.asyncio
    async def test_run_after_cancel(self):
        token = CancelToken()
        token.cancel()
        started = False

        async def request():
            nonlocal started
            started = True

        with pytest.raises(RequestCancelled):
            await token.run(request())

        assert not started
        assert token.cancelled

    @pytest.mark.asyncio
    async def test_cancel_aborts_in_flight_request(self):
        """Test that cancelling the token cancels the pending request."""
        token = CancelToken()
        request_started = asyncio.Event()
        request_cancelled = asyncio.Event()

        async def request():
            request_started.set()
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                request_cancelled.set()
                raise

        runner = asyncio.ensure_future(token.run(request()))
        await request_started.wait()
        token.cancel()

        with pytest.raises(RequestCancelled):
            await runner

        await asyncio.wait_for(request_cancelled.wait(), timeout=1)

    def test_raise_if_cancelled(self):
        token = CancelToken()
        token.raise_if_cancelled()

        token.cancel()
        with pytest.raises(RequestCancelled):
            token.raise_if_cancelled()
