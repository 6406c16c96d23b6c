"""PDF report of an optimised layout: one page per sheet plus a summary page."""

from __future__ import annotations

from typing import Optional

from matplotlib.backends.backend_pdf import PdfPages
from matplotlib.figure import Figure
from matplotlib.patches import Rectangle

from slabcut.models import CutSettings, OptimizeResult, SheetResult, StockSheet
from slabcut.optimizer import tab_exclusion_zones

# Part colours, matching the on-screen sheet view.
PART_COLORS = (
    (76, 175, 80),  # green
    (33, 150, 243),  # blue
    (255, 152, 0),  # orange
    (156, 39, 176),  # purple
    (0, 188, 212),  # cyan
    (244, 67, 54),  # red
    (255, 235, 59),  # yellow
    (121, 85, 72),  # brown
)

# A4 landscape layout, in millimetres.
PAGE_WIDTH = 297.0
PAGE_HEIGHT = 210.0
MARGIN_LEFT = 15.0
MARGIN_RIGHT = 15.0
MARGIN_TOP = 15.0
MARGIN_BOTTOM = 15.0
HEADER_HEIGHT = 12.0
STATS_HEIGHT = 20.0
DRAW_AREA_TOP = MARGIN_TOP + HEADER_HEIGHT + 5.0

_MM_PER_INCH = 25.4
_MM_PER_POINT = _MM_PER_INCH / 72.0
_AVERAGE_GLYPH_WIDTH = 0.52  # average Helvetica-like glyph width, in ems

_FOOTER = "Generated by CNCCalculator - CNC Cut List Optimizer"


def _rgb(r: int, g: int, b: int) -> tuple[float, float, float]:
    return r / 255.0, g / 255.0, b / 255.0


def _string_width(text: str, size: float) -> float:
    """Estimated width in millimetres of ``text`` at ``size`` points."""
    return len(text) * size * _AVERAGE_GLYPH_WIDTH * _MM_PER_POINT


def label_font_size(w: float, h: float) -> float:
    """Font size for a part label, chosen by the smaller side of its rectangle."""
    min_dim = min(w, h)
    if min_dim > 40:
        return 8.0
    if min_dim > 20:
        return 7.0
    return 6.0


def count_parts(result: OptimizeResult) -> int:
    """Total number of placed parts across all sheets."""
    return sum(len(s.placements) for s in result.sheets)


class _Page:
    """A single A4 landscape page addressed in millimetres, origin top-left."""

    def __init__(self) -> None:
        self.figure = Figure(
            figsize=(PAGE_WIDTH / _MM_PER_INCH, PAGE_HEIGHT / _MM_PER_INCH)
        )
        self.ax = self.figure.add_axes((0.0, 0.0, 1.0, 1.0))
        self.ax.set_xlim(0.0, PAGE_WIDTH)
        self.ax.set_ylim(PAGE_HEIGHT, 0.0)
        self.ax.axis("off")

    def rect(
        self,
        x: float,
        y: float,
        w: float,
        h: float,
        *,
        fill: Optional[tuple[float, float, float]] = None,
        edge: Optional[tuple[float, float, float]] = None,
        line_width: float = 0.2,
        hatch: Optional[str] = None,
    ) -> None:
        self.ax.add_patch(
            Rectangle(
                (x, y),
                w,
                h,
                facecolor=fill if fill is not None else "none",
                edgecolor=edge if edge is not None else "none",
                linewidth=line_width / _MM_PER_POINT,
                hatch=hatch,
            )
        )

    def line(self, x1: float, y1: float, x2: float, y2: float, *, color, width: float) -> None:
        self.ax.plot([x1, x2], [y1, y2], color=color, linewidth=width / _MM_PER_POINT)

    def text(
        self,
        x: float,
        y: float,
        s: str,
        *,
        size: float,
        bold: bool = False,
        italic: bool = False,
        color=(0.0, 0.0, 0.0),
        ha: str = "left",
        va: str = "center",
        rotation: float = 0.0,
    ) -> None:
        self.ax.text(
            x,
            y,
            s,
            fontsize=size,
            fontweight="bold" if bold else "normal",
            fontstyle="italic" if italic else "normal",
            color=color,
            ha=ha,
            va=va,
            rotation=rotation,
        )


def export_pdf(path, result: OptimizeResult, settings: CutSettings) -> None:
    """Write a PDF with a layout page per sheet followed by a summary page.

    Raises ValueError when the result has no sheets.
    """
    if not result.sheets:
        raise ValueError("no sheets to export")

    with PdfPages(path) as pdf:
        for number, sheet in enumerate(result.sheets, start=1):
            page = _Page()
            _render_sheet_page(page, sheet, settings, number)
            pdf.savefig(page.figure)
        page = _Page()
        _render_summary_page(page, result, settings)
        pdf.savefig(page.figure)


def _render_sheet_page(
    page: _Page, sheet: SheetResult, settings: CutSettings, sheet_number: int
) -> None:
    stock = sheet.stock
    page.text(
        MARGIN_LEFT,
        MARGIN_TOP + HEADER_HEIGHT / 2,
        f"Sheet {sheet_number}: {stock.label} ({stock.width:.0f} x {stock.height:.0f} mm)",
        size=14,
        bold=True,
    )
    page.text(
        MARGIN_LEFT,
        MARGIN_TOP + HEADER_HEIGHT + 2.5,
        f"Parts: {len(sheet.placements)} | Used area: {sheet.used_area():.0f} mm² | "
        f"Total area: {sheet.total_area():.0f} mm² | Efficiency: {sheet.efficiency():.1f}%",
        size=10,
    )

    draw_width = PAGE_WIDTH - MARGIN_LEFT - MARGIN_RIGHT
    draw_height = PAGE_HEIGHT - DRAW_AREA_TOP - MARGIN_BOTTOM - STATS_HEIGHT
    if stock.width > 0 and stock.height > 0:
        scale = min(draw_width / stock.width, draw_height / stock.height)
    else:
        scale = 0.0

    canvas_w = stock.width * scale
    canvas_h = stock.height * scale
    offset_x = MARGIN_LEFT + (draw_width - canvas_w) / 2
    offset_y = DRAW_AREA_TOP

    page.rect(
        offset_x,
        offset_y,
        canvas_w,
        canvas_h,
        fill=_rgb(210, 180, 140),
        edge=_rgb(100, 100, 100),
        line_width=0.5,
    )

    _draw_stock_tabs(page, stock, settings, scale, offset_x, offset_y)

    for i, p in enumerate(sheet.placements):
        color = _rgb(*PART_COLORS[i % len(PART_COLORS)])
        pw = p.placed_width() * scale
        ph = p.placed_height() * scale
        px = offset_x + p.x * scale
        py = offset_y + p.y * scale
        page.rect(px, py, pw, ph, fill=color, edge=_rgb(30, 30, 30), line_width=0.3)

        if pw > 15 and ph > 8:
            size = label_font_size(pw, ph)
            label = p.part.label
            dims = f"{p.part.width:.0f}x{p.part.height:.0f}"
            if _string_width(label, size) < pw - 2:
                page.text(px + pw / 2, py + ph / 2 - 2, label, size=size, ha="center")
            if ph > 14 and _string_width(dims, size) < pw - 2:
                page.text(px + pw / 2, py + ph / 2 + 2, dims, size=size, ha="center")

    _draw_dimension_annotations(page, stock, offset_x, offset_y, canvas_w, canvas_h)
    _draw_parts_legend(page, sheet, offset_y + canvas_h + 5)


def _draw_stock_tabs(
    page: _Page,
    stock: StockSheet,
    settings: CutSettings,
    scale: float,
    offset_x: float,
    offset_y: float,
) -> None:
    tab_config = stock.tabs if stock.tabs.enabled else settings.stock_tabs
    red = _rgb(200, 0, 0)
    for zone in tab_exclusion_zones(stock, tab_config):
        zx = offset_x + zone.x * scale
        zy = offset_y + zone.y * scale
        zw = zone.width * scale
        zh = zone.height * scale
        page.rect(zx, zy, zw, zh, fill=_rgb(255, 200, 200), edge=red, line_width=0.3)
        page.rect(zx, zy, zw, zh, edge=red, line_width=0.15, hatch="////")
        if zw > 20 and zh > 8:
            page.text(
                zx + zw / 2,
                zy + zh / 2,
                "NO CUT",
                size=6,
                bold=True,
                color=_rgb(180, 0, 0),
                ha="center",
            )


def _draw_dimension_annotations(
    page: _Page,
    stock: StockSheet,
    offset_x: float,
    offset_y: float,
    canvas_w: float,
    canvas_h: float,
) -> None:
    grey = _rgb(80, 80, 80)
    page.text(
        offset_x + canvas_w / 2,
        offset_y + canvas_h + 3,
        f"{stock.width:.0f} mm",
        size=8,
        color=grey,
        ha="center",
    )
    page.text(
        offset_x - 3,
        offset_y + canvas_h / 2,
        f"{stock.height:.0f} mm",
        size=8,
        color=grey,
        ha="center",
        rotation=90.0,
    )


def _draw_parts_legend(page: _Page, sheet: SheetResult, start_y: float) -> None:
    if not sheet.placements:
        return
    page.text(MARGIN_LEFT, start_y + 2, "Parts placed:", size=8, bold=True)

    x_pos = MARGIN_LEFT + 32
    max_x = PAGE_WIDTH - MARGIN_RIGHT
    for i, p in enumerate(sheet.placements):
        color = _rgb(*PART_COLORS[i % len(PART_COLORS)])
        label = f"{p.part.label} ({p.part.width:.0f}x{p.part.height:.0f})"
        if p.rotated:
            label += " R"
        label_w = _string_width(label, 7) + 6

        if x_pos + label_w > max_x:
            start_y += 5
            x_pos = MARGIN_LEFT

        page.rect(x_pos, start_y + 0.5, 3, 3, fill=color)
        page.text(x_pos + 4, start_y + 2, label, size=7)
        x_pos += label_w + 2


def _render_summary_page(
    page: _Page, result: OptimizeResult, settings: CutSettings
) -> None:
    black = (0.0, 0.0, 0.0)
    page.text(MARGIN_LEFT, MARGIN_TOP + 5, "Cut Optimization Summary", size=16, bold=True)
    page.line(
        MARGIN_LEFT,
        MARGIN_TOP + 12,
        PAGE_WIDTH - MARGIN_RIGHT,
        MARGIN_TOP + 12,
        color=black,
        width=0.5,
    )

    y = MARGIN_TOP + 18
    page.text(MARGIN_LEFT, y + 3.5, "Overall Statistics", size=12, bold=True)
    y += 9

    summary_items = (
        ("Total Sheets Used", str(len(result.sheets))),
        ("Overall Efficiency", f"{result.total_efficiency():.1f}%"),
        ("Total Parts Placed", str(count_parts(result))),
        ("Unplaced Parts", str(len(result.unplaced_parts))),
    )
    for label, value in summary_items:
        page.text(MARGIN_LEFT + 5, y + 3, f"{label}:", size=10)
        page.text(MARGIN_LEFT + 65, y + 3, value, size=10, bold=True)
        y += 7

    y += 5
    page.text(MARGIN_LEFT, y + 3.5, "Sheet Breakdown", size=12, bold=True)
    y += 9

    col_widths = (20, 60, 50, 50, 35, 50)
    headers = ("Sheet", "Stock", "Dimensions", "Parts", "Efficiency", "Used / Total Area")
    _table_row(page, y, col_widths, headers, _rgb(230, 230, 230), bold=True)
    y += 6

    for i, sheet in enumerate(result.sheets):
        row = (
            str(i + 1),
            sheet.stock.label,
            f"{sheet.stock.width:.0f} x {sheet.stock.height:.0f} mm",
            str(len(sheet.placements)),
            f"{sheet.efficiency():.1f}%",
            f"{sheet.used_area():.0f} / {sheet.total_area():.0f} mm²",
        )
        background = _rgb(245, 245, 245) if i % 2 == 0 else _rgb(255, 255, 255)
        _table_row(page, y, col_widths, row, background)
        y += 6

    if result.unplaced_parts:
        y += 8
        page.text(
            MARGIN_LEFT,
            y + 3.5,
            "WARNING: Unplaced Parts",
            size=11,
            bold=True,
            color=_rgb(200, 0, 0),
        )
        y += 8
        for part in result.unplaced_parts:
            page.text(
                MARGIN_LEFT + 5,
                y + 2.5,
                f"- {part.label}: {part.width:.0f} x {part.height:.0f} mm "
                f"(qty: {part.quantity})",
                size=9,
            )
            y += 5

    y += 8
    page.text(MARGIN_LEFT, y + 3.5, "Cut Settings", size=12, bold=True)
    y += 9

    settings_items = (
        ("Kerf Width", f"{settings.kerf_width:.1f} mm"),
        ("Edge Trim", f"{settings.edge_trim:.1f} mm"),
        ("Tool Diameter", f"{settings.tool_diameter:.1f} mm"),
        ("Material Thickness", f"{settings.cut_depth:.1f} mm"),
        ("Pass Depth", f"{settings.pass_depth:.1f} mm"),
    )
    for label, value in settings_items:
        page.text(MARGIN_LEFT + 5, y + 2.5, f"{label}:", size=9)
        page.text(MARGIN_LEFT + 55, y + 2.5, value, size=9)
        y += 5

    page.text(
        PAGE_WIDTH / 2,
        PAGE_HEIGHT - MARGIN_BOTTOM + 2,
        _FOOTER,
        size=8,
        italic=True,
        color=_rgb(120, 120, 120),
        ha="center",
    )


def _table_row(
    page: _Page,
    y: float,
    col_widths,
    cells,
    background,
    *,
    bold: bool = False,
) -> None:
    x = MARGIN_LEFT
    for width, cell in zip(col_widths, cells):
        page.rect(x, y, width, 6, fill=background, edge=(0.0, 0.0, 0.0), line_width=0.2)
        page.text(x + width / 2, y + 3, cell, size=9, bold=bold, ha="center")
        x += width