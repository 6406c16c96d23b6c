"""Free-rectangle bin packing and rectangle set operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from slabcut.models import TabZone

EPSILON = 0.001
MIN_FREE_SIZE = 1.0


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in sheet coordinates."""

    x: float
    y: float
    w: float
    h: float

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def bottom(self) -> float:
        return self.y + self.h

    @property
    def area(self) -> float:
        return self.w * self.h


def rects_overlap(a: Rect, b: Rect) -> bool:
    """Whether two rectangles overlap by more than the tolerance (touching is not overlap)."""
    return (
        a.x < b.right - EPSILON
        and a.right > b.x + EPSILON
        and a.y < b.bottom - EPSILON
        and a.bottom > b.y + EPSILON
    )


def contains_rect(outer: Rect, inner: Rect) -> bool:
    """Whether ``outer`` fully contains ``inner``, within the tolerance."""
    return (
        outer.x <= inner.x + EPSILON
        and outer.y <= inner.y + EPSILON
        and outer.right >= inner.right - EPSILON
        and outer.bottom >= inner.bottom - EPSILON
    )


def prune_contained(rects: list[Rect]) -> list[Rect]:
    """Drop every rectangle that lies inside another one of the list."""
    if len(rects) <= 1:
        return list(rects)
    return [
        a
        for i, a in enumerate(rects)
        if not any(i != j and contains_rect(b, a) for j, b in enumerate(rects))
    ]


def rects_intersect(a: Rect, b: Rect) -> bool:
    """Strict intersection test with no tolerance."""
    return a.x < b.right and a.right > b.x and a.y < b.bottom and a.bottom > b.y


def subtract_rect(base: Rect, sub: Rect) -> list[Rect]:
    """Subtract ``sub`` from ``base``, giving up to four remaining rectangles."""
    if not rects_intersect(base, sub):
        return [base]

    ix = max(base.x, sub.x)
    iy = max(base.y, sub.y)
    iw = min(base.right, sub.right) - ix
    ih = min(base.bottom, sub.bottom) - iy
    if iw <= 0 or ih <= 0:
        return [base]

    pieces: list[Rect] = []
    i_right = ix + iw
    i_bottom = iy + ih

    if ix > base.x:
        pieces.append(Rect(base.x, base.y, ix - base.x, base.h))
    if i_right < base.right:
        pieces.append(Rect(i_right, base.y, base.right - i_right, base.h))

    left = max(base.x, ix)
    right = min(base.right, i_right)
    if iy > base.y:
        pieces.append(Rect(left, base.y, right - left, iy - base.y))
    if i_bottom < base.bottom:
        pieces.append(Rect(left, i_bottom, right - left, base.bottom - i_bottom))

    return pieces


def subtract_exclusions(base: Rect, exclusions: Iterable[TabZone]) -> list[Rect]:
    """Remove exclusion zones from ``base`` and return the usable free rectangles.

    An exclusion that would leave nothing at all is ignored. Rectangles no
    larger than 1 mm in either direction are discarded.
    """
    free = [base]
    for zone in exclusions:
        cut = Rect(zone.x, zone.y, zone.width, zone.height)
        remaining = [piece for r in free for piece in subtract_rect(r, cut)]
        if remaining:
            free = remaining
    return [r for r in free if r.w > MIN_FREE_SIZE and r.h > MIN_FREE_SIZE]


@dataclass
class GuillotinePacker:
    """Packs rectangles into a set of free areas using best-area fit.

    After each placement every overlapping free area is split into maximal
    strips around the placed piece, and strips contained in others are pruned.
    """

    free_rects: list[Rect] = field(default_factory=list)
    kerf: float = 0.0

    def _best_index(self, w: float, h: float) -> tuple[Optional[int], float]:
        wk = w + self.kerf
        hk = h + self.kerf
        best_idx: Optional[int] = None
        best_fit = -1.0
        for i, r in enumerate(self.free_rects):
            if wk <= r.w + EPSILON and hk <= r.h + EPSILON:
                fit = r.area - w * h
                if best_idx is None or fit < best_fit:
                    best_idx, best_fit = i, fit
        return best_idx, best_fit

    def insert(self, w: float, h: float) -> Optional[tuple[float, float]]:
        """Place a piece of ``w`` x ``h``; return its (x, y) or None if it does not fit."""
        idx, _ = self._best_index(w, h)
        if idx is None:
            return None
        chosen = self.free_rects[idx]
        placed = Rect(chosen.x, chosen.y, w + self.kerf, h + self.kerf)
        self._split_around(placed)
        return chosen.x, chosen.y

    def best_fit(self, w: float, h: float) -> Optional[float]:
        """Leftover area of the tightest free area for ``w`` x ``h``, or None if none fits.

        The packer is not changed.
        """
        idx, fit = self._best_index(w, h)
        return None if idx is None else fit

    def add_free_rect(self, rect: Rect) -> None:
        """Make an extra area available for packing."""
        self.free_rects.append(rect)

    def _split_around(self, placed: Rect) -> None:
        pieces: list[Rect] = []
        for r in self.free_rects:
            if not rects_overlap(r, placed):
                pieces.append(r)
                continue
            if placed.x > r.x + EPSILON:
                pieces.append(Rect(r.x, r.y, placed.x - r.x, r.h))
            if placed.right < r.right - EPSILON:
                pieces.append(Rect(placed.right, r.y, r.right - placed.right, r.h))
            if placed.y > r.y + EPSILON:
                pieces.append(Rect(r.x, r.y, r.w, placed.y - r.y))
            if placed.bottom < r.bottom - EPSILON:
                pieces.append(Rect(r.x, placed.bottom, r.w, r.bottom - placed.bottom))
        self.free_rects = prune_contained(pieces)