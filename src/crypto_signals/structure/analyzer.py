"""Market structure: swing pivots and coarse order blocks."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Sequence


class SwingKind(str, Enum):
    HIGH = "high"
    LOW = "low"


class OrderBlockKind(str, Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"


@dataclass(frozen=True, slots=True)
class Swing:
    kind: SwingKind
    index: int
    price: float


@dataclass(frozen=True, slots=True)
class OrderBlock:
    kind: OrderBlockKind
    high: float
    low: float
    # No confirmation rule exists yet; always False.
    confirmed: bool = False


@dataclass(frozen=True, slots=True)
class StructureReport:
    swings: tuple[Swing, ...] = field(default_factory=tuple)
    order_blocks: tuple[OrderBlock, ...] = field(default_factory=tuple)


def find_swings(prices: Sequence[float], window_size: int = 5) -> List[Swing]:
    """Return local extrema that strictly dominate their symmetric window.

    Equal neighbours disqualify an index entirely.
    """
    if window_size < 1:
        raise ValueError(f"window_size must be positive, got {window_size}")
    values = list(prices)
    swings: List[Swing] = []
    for i in range(window_size, len(values) - window_size):
        price = values[i]
        neighbours = values[i - window_size : i] + values[i + 1 : i + window_size + 1]
        if all(value < price for value in neighbours):
            swings.append(Swing(SwingKind.HIGH, i, price))
        elif all(value > price for value in neighbours):
            swings.append(Swing(SwingKind.LOW, i, price))
    return swings


def identify_order_blocks(swings: Sequence[Swing]) -> List[OrderBlock]:
    blocks: List[OrderBlock] = []
    current_high: Swing | None = None
    current_low: Swing | None = None

    for swing in swings:
        if swing.kind is SwingKind.HIGH:
            if current_high is None:
                current_high = swing
            elif swing.price > current_high.price:
                blocks.append(
                    OrderBlock(OrderBlockKind.BULLISH, high=current_high.price, low=swing.price)
                )
                current_high = swing
        else:
            if current_low is None:
                current_low = swing
            elif swing.price < current_low.price:
                blocks.append(
                    OrderBlock(OrderBlockKind.BEARISH, high=swing.price, low=current_low.price)
                )
                current_low = swing
    return blocks


def analyze_structure(prices: Sequence[float], window_size: int = 5) -> StructureReport:
    swings = find_swings(prices, window_size)
    return StructureReport(
        swings=tuple(swings),
        order_blocks=tuple(identify_order_blocks(swings)),
    )
