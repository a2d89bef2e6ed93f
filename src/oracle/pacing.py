"""Reveal pacing between streamed sections."""

import asyncio


class SectionPacer:
    """Delay strategy: called before each section with its position in the stream."""

    async def pause(self, index: int) -> None:
        raise NotImplementedError


class FixedDelay(SectionPacer):
    """First section goes out immediately, every later one waits ``seconds``."""

    def __init__(self, seconds: float = 0.8):
        self.seconds = seconds

    async def pause(self, index: int) -> None:
        if index > 0 and self.seconds > 0:
            await asyncio.sleep(self.seconds)


class NoDelay(SectionPacer):
    async def pause(self, index: int) -> None:
        return None
