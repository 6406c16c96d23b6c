"""Core data model: parts, stock sheets, settings and optimisation results."""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable


class Grain(str, Enum):
    """Grain direction of a part or stock sheet."""

    NONE = "None"
    HORIZONTAL = "Horizontal"
    VERTICAL = "Vertical"

    def __str__(self) -> str:
        return self.value


class Algorithm(str, Enum):
    """Packing algorithm used by the optimiser."""

    GUILLOTINE = "guillotine"
    GENETIC = "genetic"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Point:
    """A 2D point in millimetres."""

    x: float
    y: float


class Outline(tuple):
    """A closed polygon given as a sequence of points."""

    def __new__(cls, points: Iterable[Point] = ()) -> "Outline":
        return super().__new__(cls, tuple(points))

    def rotate(self, angle: float) -> "Outline":
        """Rotate by ``angle`` radians about the origin, then shift so the
        bounding box starts at (0, 0)."""
        if not self:
            return Outline()
        cos_a, sin_a = math.cos(angle), math.sin(angle)
        turned = [
            Point(p.x * cos_a - p.y * sin_a, p.x * sin_a + p.y * cos_a) for p in self
        ]
        min_x = min(p.x for p in turned)
        min_y = min(p.y for p in turned)
        return Outline(Point(p.x - min_x, p.y - min_y) for p in turned)

    def bounding_box(self) -> tuple[Point, Point]:
        """Return the (min, max) corners of the outline's bounding box."""
        if not self:
            return Point(0.0, 0.0), Point(0.0, 0.0)
        xs = [p.x for p in self]
        ys = [p.y for p in self]
        return Point(min(xs), min(ys)), Point(max(xs), max(ys))

    def _edges(self):
        n = len(self)
        for i, p in enumerate(self):
            yield p, self[(i + 1) % n]

    def area(self) -> float:
        """Polygon area by the shoelace formula."""
        if len(self) < 3:
            return 0.0
        total = sum(a.x * b.y - b.x * a.y for a, b in self._edges())
        return abs(total) / 2.0

    def perimeter(self) -> float:
        """Length of the closed boundary."""
        if len(self) < 2:
            return 0.0
        return sum(math.hypot(b.x - a.x, b.y - a.y) for a, b in self._edges())

    def contains_point(self, x: float, y: float) -> bool:
        """Ray-casting point-in-polygon test."""
        if len(self) < 3:
            return False
        inside = False
        for a, b in self._edges():
            if (a.y > y) != (b.y > y):
                cross_x = a.x + (y - a.y) * (b.x - a.x) / (b.y - a.y)
                if x < cross_x:
                    inside = not inside
        return inside

    def translated(self, dx: float, dy: float) -> "Outline":
        """Return a copy shifted by (dx, dy)."""
        return Outline(Point(p.x + dx, p.y + dy) for p in self)


def _orientation(a: Point, b: Point, c: Point) -> float:
    return (b.x - a.x) * (c.y - a.y) - (b.y - a.y) * (c.x - a.x)


def _segments_cross(p1: Point, p2: Point, q1: Point, q2: Point) -> bool:
    d1 = _orientation(q1, q2, p1)
    d2 = _orientation(q1, q2, p2)
    d3 = _orientation(p1, p2, q1)
    d4 = _orientation(p1, p2, q2)
    return ((d1 > 0) != (d2 > 0)) and d1 != 0 and d2 != 0 and (
        (d3 > 0) != (d4 > 0)
    ) and d3 != 0 and d4 != 0


def outlines_overlap(
    a: Outline, ax: float, ay: float, b: Outline, bx: float, by: float
) -> bool:
    """Whether outline ``a`` placed at (ax, ay) overlaps ``b`` placed at (bx, by)."""
    pa = a.translated(ax, ay)
    pb = b.translated(bx, by)
    if len(pa) < 3 or len(pb) < 3:
        return False
    amin, amax = pa.bounding_box()
    bmin, bmax = pb.bounding_box()
    if amax.x <= bmin.x or bmax.x <= amin.x or amax.y <= bmin.y or bmax.y <= amin.y:
        return False
    for a1, a2 in pa._edges():
        for b1, b2 in pb._edges():
            if _segments_cross(a1, a2, b1, b2):
                return True
    if any(pb.contains_point(p.x, p.y) for p in pa):
        return True
    if any(pa.contains_point(p.x, p.y) for p in pb):
        return True
    # Identical or edge-aligned shapes: test the centroid of each.
    ca = Point(sum(p.x for p in pa) / len(pa), sum(p.y for p in pa) / len(pa))
    cb = Point(sum(p.x for p in pb) / len(pb), sum(p.y for p in pb) / len(pb))
    return pb.contains_point(ca.x, ca.y) or pa.contains_point(cb.x, cb.y)


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned rectangle in part-local coordinates."""

    x: float
    y: float
    width: float
    height: float


@dataclass
class TabZone:
    """A rectangular area of a stock sheet that must not be cut."""

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0


@dataclass
class ClampZone:
    """A machine clamp area that parts must avoid."""

    label: str = ""
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    def overlaps(self, x: float, y: float, width: float, height: float) -> bool:
        """Whether the given rectangle overlaps this zone (touching does not count)."""
        return (
            x < self.x + self.width
            and x + width > self.x
            and y < self.y + self.height
            and y + height > self.y
        )


@dataclass
class StockTabConfig:
    """Holding-tab exclusion configuration for a stock sheet."""

    enabled: bool = False
    advanced_mode: bool = False
    top_padding: float = 0.0
    bottom_padding: float = 0.0
    left_padding: float = 0.0
    right_padding: float = 0.0
    custom_zones: list[TabZone] = field(default_factory=list)


@dataclass
class OptimizeWeights:
    """Relative weights of the optimisation objectives."""

    minimize_waste: float = 1.0
    minimize_sheets: float = 0.5
    minimize_cut_len: float = 0.0
    minimize_job_time: float = 0.0

    def normalize(self) -> "OptimizeWeights":
        """Return weights scaled to sum to 1; all-zero falls back to waste/sheets."""
        total = (
            self.minimize_waste
            + self.minimize_sheets
            + self.minimize_cut_len
            + self.minimize_job_time
        )
        if total <= 0:
            return OptimizeWeights(0.5, 0.5, 0.0, 0.0)
        return OptimizeWeights(
            self.minimize_waste / total,
            self.minimize_sheets / total,
            self.minimize_cut_len / total,
            self.minimize_job_time / total,
        )


def default_optimize_weights() -> OptimizeWeights:
    """Weights favouring low waste, then few sheets."""
    return OptimizeWeights(1.0, 0.5, 0.0, 0.0)


@dataclass
class CutSettings:
    """Machine and optimisation settings."""

    kerf_width: float = 3.0
    edge_trim: float = 10.0
    tool_diameter: float = 6.0
    cut_depth: float = 18.0
    pass_depth: float = 6.0
    algorithm: Algorithm = Algorithm.GUILLOTINE
    stock_tabs: StockTabConfig = field(default_factory=StockTabConfig)
    clamp_zones: list[ClampZone] = field(default_factory=list)
    optimize_weights: OptimizeWeights = field(default_factory=default_optimize_weights)
    nesting_rotations: int = 2


def default_settings() -> CutSettings:
    """Settings used for a new project."""
    return CutSettings()


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Part:
    """A rectangular (optionally outlined) part to be cut."""

    id: str = ""
    label: str = ""
    width: float = 0.0
    height: float = 0.0
    quantity: int = 1
    grain: Grain = Grain.NONE
    material: str = ""
    outline: Outline = field(default_factory=Outline)
    cutouts: list[Outline] = field(default_factory=list)

    def cutout_bounds(self) -> list[Bounds]:
        """Bounding rectangles of the part's interior cutouts."""
        bounds = []
        for cutout in self.cutouts:
            if not cutout:
                continue
            lo, hi = Outline(cutout).bounding_box()
            bounds.append(Bounds(lo.x, lo.y, hi.x - lo.x, hi.y - lo.y))
        return bounds


def new_part(label: str, width: float, height: float, quantity: int) -> Part:
    """Create a part with a fresh identifier and no grain."""
    return Part(id=_new_id(), label=label, width=width, height=height, quantity=quantity)


@dataclass
class StockSheet:
    """A stock sheet from which parts are cut."""

    id: str = ""
    label: str = ""
    width: float = 0.0
    height: float = 0.0
    quantity: int = 1
    grain: Grain = Grain.NONE
    material: str = ""
    tabs: StockTabConfig = field(default_factory=StockTabConfig)


def new_stock_sheet(label: str, width: float, height: float, quantity: int) -> StockSheet:
    """Create a stock sheet with a fresh identifier and no grain."""
    return StockSheet(
        id=_new_id(), label=label, width=width, height=height, quantity=quantity
    )


@dataclass
class Placement:
    """A part placed on a sheet at (x, y)."""

    part: Part
    x: float = 0.0
    y: float = 0.0
    rotated: bool = False

    def placed_width(self) -> float:
        return self.part.height if self.rotated else self.part.width

    def placed_height(self) -> float:
        return self.part.width if self.rotated else self.part.height

    def cut_length(self) -> float:
        """Length of the cut path around the part."""
        if self.part.outline:
            return Outline(self.part.outline).perimeter()
        return 2.0 * (self.part.width + self.part.height)


@dataclass
class SheetResult:
    """The layout of one stock sheet."""

    stock: StockSheet
    placements: list[Placement] = field(default_factory=list)

    def used_area(self) -> float:
        return sum(p.part.width * p.part.height for p in self.placements)

    def total_area(self) -> float:
        return self.stock.width * self.stock.height

    def efficiency(self) -> float:
        """Used area as a percentage of the sheet area."""
        total = self.total_area()
        if total == 0:
            return 0.0
        return self.used_area() / total * 100.0


@dataclass
class OptimizeResult:
    """Sheets used and parts that could not be placed."""

    sheets: list[SheetResult] = field(default_factory=list)
    unplaced_parts: list[Part] = field(default_factory=list)

    def total_efficiency(self) -> float:
        """Overall used area as a percentage of all sheet area."""
        total = sum(s.total_area() for s in self.sheets)
        if total == 0:
            return 0.0
        return sum(s.used_area() for s in self.sheets) / total * 100.0

    def total_cut_length(self) -> float:
        return sum(p.cut_length() for s in self.sheets for p in s.placements)

    def estimated_job_time(
        self,
        feed_rate: float,
        pass_depth: float,
        cut_depth: float,
        setup_minutes: float,
    ) -> float:
        """Estimated minutes: cutting at ``feed_rate`` mm/min over all passes,
        plus ``setup_minutes`` for each sheet."""
        passes = 1.0
        if pass_depth > 0 and cut_depth > 0:
            passes = math.ceil(cut_depth / pass_depth)
        cutting = 0.0
        if feed_rate > 0:
            cutting = self.total_cut_length() * passes / feed_rate
        return cutting + setup_minutes * len(self.sheets)


def can_place_with_grain(part_grain: Grain, stock_grain: Grain) -> tuple[bool, bool]:
    """Return (normal allowed, rotated allowed) for a part on a stock sheet."""
    if part_grain == Grain.NONE:
        return True, True
    if stock_grain == Grain.NONE or part_grain == stock_grain:
        return True, False
    return False, False