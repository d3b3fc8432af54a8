"""Grid layout for avatar badges

Pure geometry: avatar positions, canvas size and label length limits are all
derived from the render options and the number of users shown.

    row = index // per_row, col = index % per_row
    x = margin + col * (avatar_size + margin)
    y = margin + row * (avatar_size + text_offset + margin) + title_height

Label widths use a fixed per-character estimate (font_size * 0.4). It is a
heuristic, not font metrics, and is kept as-is so badges look the same as
before.
"""
import math
from dataclasses import dataclass
from typing import Tuple

from models.render_options import RenderOptions

CHAR_WIDTH_RATIO = 0.4


@dataclass(frozen=True)
class BadgeLayout:
    """Geometry for one badge render."""
    options: RenderOptions
    count: int  # Number of users actually displayed

    @classmethod
    def for_users(cls, user_count: int, options: RenderOptions) -> "BadgeLayout":
        return cls(options=options, count=min(options.limit, user_count))

    @property
    def title_height(self) -> int:
        return self.options.font_size * 3 if self.options.title else 0

    @property
    def title_font_size(self) -> int:
        return self.options.font_size * 2

    @property
    def row_height(self) -> int:
        o = self.options
        return o.avatar_size + o.text_offset + o.margin

    @property
    def total_rows(self) -> int:
        return math.ceil(self.count / self.options.per_row)

    @property
    def width(self) -> int:
        o = self.options
        if o.svg_width:
            return o.svg_width
        return o.per_row * (o.avatar_size + o.margin) + o.margin

    @property
    def height(self) -> int:
        o = self.options
        if o.svg_height:
            return o.svg_height
        return self.total_rows * self.row_height + o.margin + self.title_height

    @property
    def view_box(self) -> str:
        return f"0 0 {self.width} {self.height}"

    @property
    def max_label_chars(self) -> int:
        return math.floor(self.options.avatar_size / (self.options.font_size * CHAR_WIDTH_RATIO))

    def cell(self, index: int) -> Tuple[int, int]:
        """Row and column of the avatar at index."""
        return divmod(index, self.options.per_row)

    def position(self, index: int) -> Tuple[int, int]:
        """Top-left (x, y) of the avatar at index."""
        o = self.options
        row, col = self.cell(index)
        x = o.margin + col * (o.avatar_size + o.margin)
        y = o.margin + row * self.row_height + self.title_height
        return x, y

    def label_y(self, index: int) -> int:
        _, y = self.position(index)
        return y + self.options.avatar_size + self.options.text_offset
