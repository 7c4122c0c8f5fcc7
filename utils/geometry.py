"""Label box geometry: percent positions, pointer deltas and pixel conversion."""

from dataclasses import dataclass
from typing import Tuple

from models.label_config import Position


@dataclass(frozen=True)
class Box:
    """On-screen rectangle of one label instance."""
    left: float
    top: float
    width: float
    height: float

    @classmethod
    def from_dict(cls, d: dict) -> "Box":
        return cls(
            left=float(d.get("left", 0)),
            top=float(d.get("top", 0)),
            width=float(d["width"]),
            height=float(d["height"]),
        )


def clamp_percent(value: float) -> float:
    return max(0.0, min(100.0, value))


def moved_position(start: Position, start_pointer: Tuple[float, float],
                   pointer: Tuple[float, float], box: Box) -> Position:
    """Position after the pointer moved from ``start_pointer`` to ``pointer``."""
    if box.width <= 0 or box.height <= 0:
        return Position(start.x, start.y)
    dx = (pointer[0] - start_pointer[0]) / box.width * 100
    dy = (pointer[1] - start_pointer[1]) / box.height * 100
    return Position(
        x=round(clamp_percent(start.x + dx), 2),
        y=round(clamp_percent(start.y + dy), 2),
    )


def percent_to_pixels(position: Position, width: int, height: int,
                      offset_x: float = 0, offset_y: float = 0) -> Tuple[float, float]:
    """Convert a percent position inside a label to image coordinates."""
    return (offset_x + position.x / 100 * width, offset_y + position.y / 100 * height)
