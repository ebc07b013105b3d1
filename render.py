"""Build the month as a declarative drawing (and serialize it to SVG)."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from typing import Sequence, Union
from xml.sax.saxutils import escape, quoteattr

from calendar_logic import (
    WEEKDAY_LABELS,
    DayCell,
    Weekend,
    cell_position,
    month_title,
    short_label,
)
from marks import MarkBook, MarkState, display_reason

CANVAS_WIDTH = 1000
CANVAS_HEIGHT = 800

# Colours
BG = "white"
CELL_BORDER = "#e5e7eb"
PINK_BG = "#fef2f2"
BLUE_BG = "#eff6ff"
TEXT = "black"
MUTED_TEXT = "#9ca3af"
RED_TEXT = "#dc2626"
BLUE_TEXT = "#2563eb"
CIRCLE_STROKE = "#22c55e"
CROSS_STROKE = "#ef4444"
TRIANGLE_STROKE = "#f59e0b"

# Layout
HEADER_X, HEADER_Y = 400, 40
WEEKDAY_X0, WEEKDAY_Y = 50, 80
GRID_X0, GRID_Y0 = 10, 120
COL_PITCH, ROW_PITCH = 100, 70
CELL_W, CELL_H = 90, 60
LEGEND_X, LEGEND_Y0 = 750, 120
LEGEND_TITLE_GAP, LEGEND_LINE, LEGEND_SECTION_GAP = 30, 25, 20
MARK_STROKE = 2

LEGEND_TITLES = {
    MarkState.CROSS: "✕ reasons",
    MarkState.TRIANGLE: "△ reasons",
}

Point = tuple[float, float]

# Characters XML 1.0 cannot carry, even escaped
_XML_ILLEGAL = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


# ------------------------------------------------------------------
# Drawing elements
# ------------------------------------------------------------------
def _num(v: float) -> str:
    return f"{v:g}"


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float
    fill: str = BG
    stroke: str | None = None

    def to_svg(self) -> str:
        stroke = f" stroke={quoteattr(self.stroke)}" if self.stroke else ""
        return (f'<rect x="{_num(self.x)}" y="{_num(self.y)}" width="{_num(self.width)}" '
                f'height="{_num(self.height)}" fill={quoteattr(self.fill)}{stroke}/>')


@dataclass(frozen=True)
class Text:
    x: float
    y: float
    text: str
    size: int
    fill: str = TEXT
    bold: bool = False
    anchor: str = "start"  # "start" or "middle"; y is the baseline

    def to_svg(self) -> str:
        attrs = f'x="{_num(self.x)}" y="{_num(self.y)}"'
        if self.anchor != "start":
            attrs += f" text-anchor={quoteattr(self.anchor)}"
        attrs += f' font-size="{self.size}"'
        if self.bold:
            attrs += ' font-weight="bold"'
        if self.fill != TEXT:
            attrs += f" fill={quoteattr(self.fill)}"
        return f"<text {attrs}>{escape(_XML_ILLEGAL.sub('', self.text))}</text>"


@dataclass(frozen=True)
class Circle:
    cx: float
    cy: float
    r: float
    stroke: str
    stroke_width: float = MARK_STROKE

    def to_svg(self) -> str:
        return (f'<circle cx="{_num(self.cx)}" cy="{_num(self.cy)}" r="{_num(self.r)}" '
                f'fill="none" stroke={quoteattr(self.stroke)} '
                f'stroke-width="{_num(self.stroke_width)}"/>')


@dataclass(frozen=True)
class Path:
    """One or more polylines; ``closed`` joins the last point of each to its first."""

    subpaths: tuple[tuple[Point, ...], ...]
    stroke: str
    stroke_width: float = MARK_STROKE
    closed: bool = False

    def to_svg(self) -> str:
        parts = []
        for points in self.subpaths:
            head, *rest = points
            parts.append(f"M{_num(head[0])},{_num(head[1])}")
            parts.extend(f"L{_num(x)},{_num(y)}" for x, y in rest)
            if self.closed:
                parts.append("Z")
        fill = ' fill="none"' if self.closed else ""
        return (f'<path d="{" ".join(parts)}"{fill} stroke={quoteattr(self.stroke)} '
                f'stroke-width="{_num(self.stroke_width)}"/>')


Element = Union[Rect, Text, Circle, Path]


@dataclass
class Drawing:
    width: int = CANVAS_WIDTH
    height: int = CANVAS_HEIGHT
    elements: list[Element] = field(default_factory=list)

    def add(self, element: Element) -> None:
        self.elements.append(element)

    def to_svg(self) -> str:
        body = "\n  ".join(e.to_svg() for e in self.elements)
        return (f'<svg width="{self.width}" height="{self.height}" '
                f'xmlns="http://www.w3.org/2000/svg">\n  {body}\n</svg>\n')


# ------------------------------------------------------------------
# Colour rules
# ------------------------------------------------------------------
def cell_fill(cell: DayCell) -> str:
    """Background ignores whether the day belongs to the displayed month."""
    if cell.holiday or cell.weekend is Weekend.SUNDAY:
        return PINK_BG
    if cell.weekend is Weekend.SATURDAY:
        return BLUE_BG
    return BG


def date_text_color(cell: DayCell) -> str:
    color = TEXT if cell.is_current_month else MUTED_TEXT
    if cell.holiday or (cell.weekend is Weekend.SUNDAY and cell.is_current_month):
        color = RED_TEXT
    if cell.weekend is Weekend.SATURDAY and cell.is_current_month and not cell.holiday:
        color = BLUE_TEXT
    return color


def mark_glyph(mark: MarkState, cx: float, top: float) -> Element | None:
    """Glyph for *mark* centred horizontally on *cx*, spanning top..top+16."""
    if mark is MarkState.CIRCLE:
        return Circle(cx, top + 8, 8, CIRCLE_STROKE)
    if mark is MarkState.CROSS:
        return Path(
            (((cx - 8, top), (cx + 8, top + 16)),
             ((cx + 8, top), (cx - 8, top + 16))),
            CROSS_STROKE,
        )
    if mark is MarkState.TRIANGLE:
        return Path(
            (((cx, top), (cx - 8, top + 16), (cx + 8, top + 16)),),
            TRIANGLE_STROKE,
            closed=True,
        )
    return None


# ------------------------------------------------------------------
# Document
# ------------------------------------------------------------------
def build_drawing(reference: date, cells: Sequence[DayCell], marks: MarkBook) -> Drawing:
    drawing = Drawing()
    drawing.add(Rect(0, 0, CANVAS_WIDTH, CANVAS_HEIGHT, fill=BG))
    drawing.add(Text(HEADER_X, HEADER_Y, month_title(reference.year, reference.month),
                     24, bold=True, anchor="middle"))

    for i, label in enumerate(WEEKDAY_LABELS):
        drawing.add(Text(WEEKDAY_X0 + i * COL_PITCH, WEEKDAY_Y, label, 16,
                         bold=True, anchor="middle"))

    for index, cell in enumerate(cells):
        row, col = cell_position(index)
        x = GRID_X0 + col * COL_PITCH
        y = GRID_Y0 + row * ROW_PITCH
        drawing.add(Rect(x, y - 25, CELL_W, CELL_H, fill=cell_fill(cell), stroke=CELL_BORDER))
        drawing.add(Text(x + CELL_W / 2, y, str(cell.date.day), 14,
                         fill=date_text_color(cell), anchor="middle"))
        glyph = mark_glyph(cell.mark, x + CELL_W / 2, y + 7)
        if glyph is not None:
            drawing.add(glyph)

    _add_legend(drawing, marks)
    return drawing


def _add_legend(drawing: Drawing, marks: MarkBook) -> None:
    # Sections stack: the Triangle list starts wherever the Cross list ended
    cursor = LEGEND_Y0
    for kind in (MarkState.CROSS, MarkState.TRIANGLE):
        entries = marks.list_by_kind(kind)
        if not entries:
            continue
        drawing.add(Text(LEGEND_X, cursor, LEGEND_TITLES[kind], 18, bold=True))
        cursor += LEGEND_TITLE_GAP
        for i, entry in enumerate(entries):
            line = f"{short_label(entry.date)}: {display_reason(entry.reason)}"
            drawing.add(Text(LEGEND_X, cursor + i * LEGEND_LINE, line, 14))
        cursor += len(entries) * LEGEND_LINE + LEGEND_SECTION_GAP


def render_month(state, today: date | None = None) -> Drawing:
    """Drawing of the month currently shown by a ``CalendarState``."""
    return build_drawing(state.reference, state.grid(today), state.marks)
