"""Render options for avatar badges"""
from dataclasses import dataclass
from enum import Enum


class Shape(str, Enum):
    """Avatar clip shape"""
    SQUARE = "square"
    CIRCLE = "circle"
    SQUIRCLE = "squircle"


# Corner rounding used in the avatar clip-path
SHAPE_ROUNDING = {
    Shape.SQUARE: "0%",
    Shape.CIRCLE: "50%",
    Shape.SQUIRCLE: "25%",
}


class OutputFormat(str, Enum):
    SVG = "svg"
    PNG = "png"


DEFAULT_FONT_FAMILY = "'Mona Sans', 'Open Sans', Verdana, Arial, sans-serif"


@dataclass(frozen=True)
class RenderOptions:
    """Resolved badge options.

    Values are expected to be validated and clamped already (see
    models.badge_params); the renderer does no bounds checking.
    """
    title: str = ""
    avatar_size: int = 50
    per_row: int = 8
    shape: Shape = Shape.SQUARE
    hide_label: bool = False
    font_size: int = 12
    font_family: str = DEFAULT_FONT_FAMILY
    text_color: str = "333333"
    background_color: str = "transparent"
    limit: int = 96
    outer_border_width: int = 0
    outer_border_color: str = ""
    outer_border_radius: int = 0
    margin: int = 20
    text_offset: int = 20
    svg_width: int = 0   # 0 = auto
    svg_height: int = 0  # 0 = auto
    footer_text: str = ""
    dynamic: bool = False
    is_responsive: bool = False

    @property
    def clip_rounding(self) -> str:
        return SHAPE_ROUNDING[self.shape]
