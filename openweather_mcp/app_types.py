"""Shared dataclasses and lightweight types used across modules."""

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class MapImage:
    """Reference to a weather map tile; the image bytes are never downloaded."""
    layer: str
    url: str
    zoom: int
    x: int
    y: int


@dataclass
class ToolReport:
    """Text report produced by one tool invocation, plus any tile references."""
    text: str
    images: List[MapImage] = field(default_factory=list)
    is_error: bool = False

    @classmethod
    def error(cls, action: str, message: str) -> "ToolReport":
        return cls(text=f"Failed to {action}: {message}", is_error=True)
