from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence


class DataUnavailable(Exception):
    """Raised by a price source that cannot supply a series."""

    def __init__(self, instrument: str, timeframe: str, reason: str) -> None:
        super().__init__(f"{instrument} {timeframe}: {reason}")
        self.instrument = instrument
        self.timeframe = timeframe
        self.reason = reason


class PriceSource(ABC):
    @abstractmethod
    async def fetch(self, instrument: str, timeframe: str) -> Sequence[float]:
        """Return closing prices for the pair, oldest first."""
        raise NotImplementedError

    async def aclose(self) -> None:
        return None
