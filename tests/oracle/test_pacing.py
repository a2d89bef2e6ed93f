"""Tests for section reveal pacing."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from oracle import pacing
from oracle.pacing import FixedDelay, NoDelay


@pytest.fixture
def sleep(monkeypatch):
    mock = AsyncMock()
    monkeypatch.setattr(pacing, "asyncio", MagicMock(sleep=mock))
    return mock


class TestFixedDelay:
    @pytest.mark.asyncio
    async def test_first_section_is_immediate(self, sleep):
        await FixedDelay().pause(0)
        sleep.assert_not_called()

    @pytest.mark.asyncio
    async def test_later_sections_wait(self, sleep):
        pacer = FixedDelay(seconds=0.8)
        for index in range(6):
            await pacer.pause(index)
        assert sleep.await_count == 5
        assert all(call.args == (0.8,) for call in sleep.await_args_list)

    @pytest.mark.asyncio
    async def test_zero_seconds_never_sleeps(self, sleep):
        await FixedDelay(seconds=0).pause(3)
        sleep.assert_not_called()


@pytest.mark.asyncio
async def test_no_delay(sleep):
    pacer = NoDelay()
    for index in range(6):
        await pacer.pause(index)
    sleep.assert_not_called()
