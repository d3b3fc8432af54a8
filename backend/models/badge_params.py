"""Badge query parameters

Parses raw query strings into typed, clamped, defaulted values. Bad input
never fails: unparsable values fall back to the default and out-of-range
numbers are clamped.
"""
import math
from typing import Any, Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.render_options import DEFAULT_FONT_FAMILY, OutputFormat, RenderOptions, Shape


# field -> (default, min, max)
NUMBER_LIMITS: Dict[str, Tuple[int, int, int]] = {
    "avatar_size": (50, 30, 200),
    "per_row": (8, 1, 50),
    "font_size": (12, 10, 32),
    "limit": (96, 1, 500),
    "outer_border_width": (0, 0, 20),
    "outer_border_radius": (0, 0, 100),
    "margin": (20, 0, 100),
    "text_offset": (20, 0, 100),
    "svg_width": (0, 0, 5000),
    "svg_height": (0, 0, 5000),
}

# Styling strings where an empty value means "use the default"
STYLE_DEFAULTS = {
    "font_family": DEFAULT_FONT_FAMILY,
    "text_color": "333333",
    "background_color": "transparent",
}


def _to_number(value: Any, default: int) -> float:
    """Parse a decimal number: None and blank strings are 0, anything else unparsable is the default."""
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return 0
        try:
            number = float(text)
        except ValueError:
            return default
    return default if math.isnan(number) or math.isinf(number) else number


class BadgeParams(BaseModel):
    """Query parameters accepted by every badge endpoint."""
    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    avatar_size: int = Field(default=50, alias="avatarSize")
    per_row: int = Field(default=8, alias="perRow")
    shape: Shape = Shape.SQUARE
    hide_label: bool = Field(default=False, alias="hideLabel")
    font_size: int = Field(default=12, alias="fontSize")
    font_family: str = Field(default=DEFAULT_FONT_FAMILY, alias="fontFamily")
    text_color: str = Field(default="333333", alias="textColor")
    background_color: str = Field(default="transparent", alias="backgroundColor")
    limit: int = 96
    outer_border_width: int = Field(default=0, alias="outerBorderWidth")
    outer_border_color: str = Field(default="", alias="outerBorderColor")
    outer_border_radius: int = Field(default=0, alias="outerBorderRadius")
    margin: int = 20
    text_offset: int = Field(default=20, alias="textOffset")
    svg_width: int = Field(default=0, alias="svgWidth")
    svg_height: int = Field(default=0, alias="svgHeight")
    footer_text: str = Field(default="", alias="footerText")
    dynamic: bool = False
    is_responsive: bool = Field(default=False, alias="isResponsive")
    format: OutputFormat = OutputFormat.SVG

    @field_validator(*NUMBER_LIMITS.keys(), mode="before")
    @classmethod
    def _clamp_number(cls, value: Any, info) -> int:
        default, low, high = NUMBER_LIMITS[info.field_name]
        number = _to_number(value, default)
        return int(min(max(number, low), high))

    @field_validator("hide_label", "dynamic", "is_responsive", mode="before")
    @classmethod
    def _parse_bool(cls, value: Any, info) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value in ("true", "false"):
            return value == "true"
        return cls.model_fields[info.field_name].default

    @field_validator("shape", "format", mode="before")
    @classmethod
    def _parse_enum(cls, value: Any, info) -> Any:
        enum_type = Shape if info.field_name == "shape" else OutputFormat
        try:
            return enum_type(value)
        except (ValueError, TypeError):
            return cls.model_fields[info.field_name].default

    @field_validator("title", "outer_border_color", "footer_text", *STYLE_DEFAULTS.keys(), mode="before")
    @classmethod
    def _parse_string(cls, value: Any, info) -> str:
        if value is None:
            value = ""
        value = str(value)
        if not value and info.field_name in STYLE_DEFAULTS:
            return STYLE_DEFAULTS[info.field_name]
        return value

    @classmethod
    def from_query(cls, query: Dict[str, Any]) -> "BadgeParams":
        """Build from a raw query mapping, ignoring unknown keys."""
        return cls.model_validate(dict(query))

    def to_render_options(self) -> RenderOptions:
        return RenderOptions(
            title=self.title,
            avatar_size=self.avatar_size,
            per_row=self.per_row,
            shape=self.shape,
            hide_label=self.hide_label,
            font_size=self.font_size,
            font_family=self.font_family,
            text_color=self.text_color,
            background_color=self.background_color,
            limit=self.limit,
            outer_border_width=self.outer_border_width,
            outer_border_color=self.outer_border_color,
            outer_border_radius=self.outer_border_radius,
            margin=self.margin,
            text_offset=self.text_offset,
            svg_width=self.svg_width,
            svg_height=self.svg_height,
            footer_text=self.footer_text,
            dynamic=self.dynamic,
            is_responsive=self.is_responsive,
        )
