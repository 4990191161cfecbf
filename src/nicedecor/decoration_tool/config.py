# nicedecor/src/nicedecor/decoration_tool/config.py

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Tool(Enum):
    """Editing tools offered by the toolbar."""
    PEN = "pen"
    ERASER = "eraser"
    MOSAIC = "mosaic"
    HAND = "hand"


class MosaicLevel(Enum):
    """Mosaic strength; the value is the block edge length in bitmap pixels."""
    COARSEST = 50
    COARSE = 30
    MEDIUM = 20
    FINE = 10

    @property
    def block_size(self) -> int:
        return int(self.value)

    @property
    def label(self) -> str:
        return self.name.capitalize()


@dataclass
class DecorationToolConfig:
    # History
    max_history: int = 50

    # Mosaic
    min_mosaic_size: int = 5                # clipped region must be at least this wide and tall
    default_mosaic_level: MosaicLevel = MosaicLevel.MEDIUM

    # Hand tool and wheel zoom
    enable_hand_tool: bool = True
    zoom_step: float = 0.1                  # scale change per wheel notch
    min_scale: float = 0.1
    max_scale: float = 10.0

    # Pen
    palette: list[str] = field(
        default_factory=lambda: ["red", "blue", "green", "yellow", "black", "white"]
    )
    pen_sizes: list[int] = field(default_factory=lambda: [1, 3, 5, 10, 20])
    default_color: str = "red"
    default_pen_size: int = 1

    # Standalone placeholder canvas (before or without a host image)
    placeholder_width: int = 800
    placeholder_height: int = 600
    placeholder_fill: tuple[int, int, int, int] = (255, 255, 255, 255)

    # Mosaic selection overlay
    selection_color: str = "#ff0000"
    selection_line_width: float = 2.0
    selection_dash: str = "5,5"

    # Save metadata handed to the host
    save_name_suffix: str = "_decorated"
    save_tags: list[str] = field(default_factory=lambda: ["decorated", "edited"])
    save_website: str = "nicedecor"
    save_annotation: str = "Edited with the decoration tool"

    def __post_init__(self) -> None:
        if self.max_history < 1:
            raise ValueError("max_history must be at least 1")
        if not 0 < self.min_scale <= self.max_scale:
            raise ValueError("scale bounds must satisfy 0 < min_scale <= max_scale")
        if self.default_pen_size < 1:
            raise ValueError("default_pen_size must be positive")
