"""Sheet layout optimisation: material grouping, stock selection and packing."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

from slabcut.models import (
    Algorithm,
    CutSettings,
    Grain,
    OptimizeResult,
    Part,
    Placement,
    SheetResult,
    StockSheet,
    StockTabConfig,
    TabZone,
    can_place_with_grain,
    default_settings,
)
from slabcut.packer import GuillotinePacker, Rect, subtract_exclusions

MIN_CUTOUT_SIZE = 1.0


class RotationStrategy(Enum):
    """How parts are oriented while packing one sheet."""

    BEST_FIT = "best_fit"
    ALL_NORMAL = "all_normal"
    ALL_ROTATED = "all_rotated"


@dataclass
class MaterialGroup:
    """Parts and the stock sheets they may be cut from."""

    material: str = ""
    parts: list[Part] = field(default_factory=list)
    stocks: list[StockSheet] = field(default_factory=list)


def group_by_material(parts: list[Part], stocks: list[StockSheet]) -> list[MaterialGroup]:
    """Split parts and stocks into groups by material.

    Stocks without a material join every material group. Parts without a
    material form a final group that may use every stock. With no materials
    at all, everything forms a single group.
    """
    parts = list(parts or [])
    stocks = list(stocks or [])
    materials = sorted(
        {p.material for p in parts if p.material} | {s.material for s in stocks if s.material}
    )
    if not materials:
        return [MaterialGroup(parts=parts, stocks=stocks)]

    universal_parts = [p for p in parts if not p.material]
    universal_stocks = [s for s in stocks if not s.material]

    groups = [
        MaterialGroup(
            material=mat,
            parts=[p for p in parts if p.material == mat],
            stocks=[s for s in stocks if s.material == mat] + universal_stocks,
        )
        for mat in materials
    ]
    if universal_parts:
        groups.append(MaterialGroup(parts=universal_parts, stocks=list(stocks)))
    return groups


def tab_exclusion_zones(stock: StockSheet, tab_config: StockTabConfig) -> list[TabZone]:
    """No-cut zones defined by a holding-tab configuration for ``stock``."""
    if not tab_config.enabled:
        return []
    if tab_config.advanced_mode:
        return list(tab_config.custom_zones)
    zones = []
    if tab_config.top_padding > 0:
        zones.append(TabZone(0.0, 0.0, stock.width, tab_config.top_padding))
    if tab_config.bottom_padding > 0:
        zones.append(
            TabZone(
                0.0,
                stock.height - tab_config.bottom_padding,
                stock.width,
                tab_config.bottom_padding,
            )
        )
    if tab_config.left_padding > 0:
        zones.append(TabZone(0.0, 0.0, tab_config.left_padding, stock.height))
    if tab_config.right_padding > 0:
        zones.append(
            TabZone(
                stock.width - tab_config.right_padding,
                0.0,
                tab_config.right_padding,
                stock.height,
            )
        )
    return zones


def add_cutout_free_rects(
    packer: GuillotinePacker,
    part: Part,
    part_x: float,
    part_y: float,
    rotated: bool,
    kerf: float,
) -> None:
    """Offer the interior cutouts of a placed part to the packer as free space."""
    for cb in part.cutout_bounds():
        if rotated:
            x, y, w, h = part_x + cb.y, part_y + cb.x, cb.height, cb.width
        else:
            x, y, w, h = part_x + cb.x, part_y + cb.y, cb.width, cb.height
        x += kerf
        y += kerf
        w -= 2 * kerf
        h -= 2 * kerf
        if w > MIN_CUTOUT_SIZE and h > MIN_CUTOUT_SIZE:
            packer.add_free_rect(Rect(x, y, w, h))


def _expand(items):
    return [replace(item, quantity=1) for item in items for _ in range(item.quantity)]


def _area(part: Part) -> float:
    return part.width * part.height


@dataclass
class Optimizer:
    """Lays parts out on stock sheets according to the cut settings."""

    settings: CutSettings = field(default_factory=default_settings)

    def optimize(self, parts: list[Part], stocks: list[StockSheet]) -> OptimizeResult:
        """Lay out ``parts`` on ``stocks``, one material group at a time."""
        combined = OptimizeResult()
        for group in group_by_material(parts, stocks):
            if self.settings.algorithm == Algorithm.GENETIC:
                from slabcut.genetic import optimize_genetic

                result = optimize_genetic(self.settings, group.parts, group.stocks)
            else:
                result = self._optimize_guillotine(group.parts, group.stocks)
            combined.sheets.extend(result.sheets)
            combined.unplaced_parts.extend(result.unplaced_parts)
        return combined

    def _optimize_guillotine(
        self, parts: list[Part], stocks: list[StockSheet]
    ) -> OptimizeResult:
        remaining = sorted(_expand(parts), key=_area, reverse=True)
        pool = _expand(stocks)
        result = OptimizeResult()
        while remaining and pool:
            idx = self.select_best_stock(pool, remaining)
            if idx is None:
                break
            stock = pool.pop(idx)
            sheet, remaining = self.pack_sheet_best_strategy(stock, remaining)
            if sheet.placements:
                result.sheets.append(sheet)
        result.unplaced_parts = list(remaining)
        return result

    def _tab_config(self, stock: StockSheet) -> StockTabConfig:
        return stock.tabs if stock.tabs.enabled else self.settings.stock_tabs

    def _new_packer(self, stock: StockSheet) -> GuillotinePacker:
        rects = self.calculate_free_rects(stock, self._tab_config(stock))
        return GuillotinePacker(list(rects), self.settings.kerf_width)

    def select_best_stock(
        self, stocks: list[StockSheet], parts: list[Part]
    ) -> Optional[int]:
        """Index of the stock that suits the remaining parts best, or None.

        Only stocks that can hold the largest part are considered; among
        those, a trial packing picks the one with the highest efficiency.
        """
        if not stocks or not parts:
            return None
        largest = max(parts, key=_area)
        trim = self.settings.edge_trim
        kerf = self.settings.kerf_width

        candidates = []
        for i, stock in enumerate(stocks):
            uw = stock.width - 2 * trim
            uh = stock.height - 2 * trim
            can_normal, can_rotated = can_place_with_grain(largest.grain, stock.grain)
            fits_normal = (
                can_normal and largest.width + kerf <= uw and largest.height + kerf <= uh
            )
            fits_rotated = (
                can_rotated and largest.height + kerf <= uw and largest.width + kerf <= uh
            )
            if fits_normal or fits_rotated:
                candidates.append(i)

        if not candidates:
            return None
        if len(candidates) == 1:
            return candidates[0]

        seen = set()
        unique = []
        for idx in candidates:
            key = (stocks[idx].width, stocks[idx].height)
            if key not in seen:
                seen.add(key)
                unique.append(idx)

        best_idx: Optional[int] = None
        best_score = -1.0
        for idx in unique:
            stock = stocks[idx]
            packer = self._new_packer(stock)
            placed_area = 0.0
            for part in parts:
                can_normal, can_rotated = can_place_with_grain(part.grain, stock.grain)
                if (can_normal and packer.insert(part.width, part.height) is not None) or (
                    can_rotated and packer.insert(part.height, part.width) is not None
                ):
                    placed_area += _area(part)
            stock_area = stock.width * stock.height
            if stock_area == 0:
                continue
            efficiency = placed_area / stock_area
            if efficiency > best_score:
                best_score = efficiency
                best_idx = idx

        return candidates[0] if best_idx is None else best_idx

    def calculate_free_rects(
        self, stock: StockSheet, tab_config: StockTabConfig
    ) -> list[Rect]:
        """Initial free areas of a sheet after edge trim, tabs and clamp zones."""
        trim = self.settings.edge_trim
        base = Rect(trim, trim, stock.width - 2 * trim, stock.height - 2 * trim)
        exclusions = tab_exclusion_zones(stock, tab_config)
        exclusions.extend(
            TabZone(cz.x, cz.y, cz.width, cz.height) for cz in self.settings.clamp_zones
        )
        if not exclusions:
            return [base]
        return subtract_exclusions(base, exclusions)

    def _try_outline_rotations(
        self, packer: GuillotinePacker, part: Part, rotations: int
    ) -> Optional[Placement]:
        if rotations < 1:
            rotations = 2
        step = math.pi / rotations
        candidates = []
        for i in range(rotations):
            turned = part.outline.rotate(i * step)
            lo, hi = turned.bounding_box()
            w, h = hi.x - lo.x, hi.y - lo.y
            if w > 0 and h > 0:
                candidates.append((w * h, turned, w, h))
        candidates.sort(key=lambda c: c[0])
        for _, turned, w, h in candidates:
            pos = packer.insert(w, h)
            if pos is not None:
                placed_part = replace(part, outline=turned, width=w, height=h)
                return Placement(part=placed_part, x=pos[0], y=pos[1], rotated=False)
        return None

    @staticmethod
    def _place(packer: GuillotinePacker, part: Part, rotated: bool) -> Optional[Placement]:
        w, h = (part.height, part.width) if rotated else (part.width, part.height)
        pos = packer.insert(w, h)
        if pos is None:
            return None
        return Placement(part=part, x=pos[0], y=pos[1], rotated=rotated)

    def _place_with_strategy(
        self,
        packer: GuillotinePacker,
        part: Part,
        can_normal: bool,
        can_rotated: bool,
        strategy: RotationStrategy,
    ) -> Optional[Placement]:
        placement = None
        non_square = part.width != part.height

        if strategy is RotationStrategy.ALL_ROTATED:
            if can_rotated and non_square:
                placement = self._place(packer, part, True)
            if placement is None and can_normal:
                placement = self._place(packer, part, False)
            return placement

        if strategy is RotationStrategy.BEST_FIT:
            if can_normal and can_rotated and non_square:
                normal_fit = packer.best_fit(part.width, part.height)
                rotated_fit = packer.best_fit(part.height, part.width)
                prefer_rotated = rotated_fit is not None and (
                    normal_fit is None or rotated_fit < normal_fit
                )
                if prefer_rotated:
                    placement = self._place(packer, part, True)
                elif normal_fit is not None:
                    placement = self._place(packer, part, False)

        if placement is None and can_normal:
            placement = self._place(packer, part, False)
        if placement is None and can_rotated:
            placement = self._place(packer, part, True)
        return placement

    def pack_sheet(
        self, stock: StockSheet, parts: list[Part], strategy: RotationStrategy
    ) -> tuple[SheetResult, list[Part]]:
        """Pack parts onto one sheet; return the sheet and the parts left over."""
        sheet = SheetResult(stock=stock)
        unplaced: list[Part] = []
        packer = self._new_packer(stock)
        rotations = self.settings.nesting_rotations

        for part in parts:
            can_normal, can_rotated = can_place_with_grain(part.grain, stock.grain)
            placement = None
            if part.outline and rotations > 2 and part.grain == Grain.NONE:
                placement = self._try_outline_rotations(packer, part, rotations)
            if placement is None:
                placement = self._place_with_strategy(
                    packer, part, can_normal, can_rotated, strategy
                )
            if placement is None:
                unplaced.append(part)
                continue
            sheet.placements.append(placement)
            if part.cutouts:
                add_cutout_free_rects(
                    packer,
                    part,
                    placement.x,
                    placement.y,
                    placement.rotated,
                    self.settings.kerf_width,
                )
        return sheet, unplaced

    def pack_sheet_best_strategy(
        self, stock: StockSheet, parts: list[Part]
    ) -> tuple[SheetResult, list[Part]]:
        """Pack with every rotation strategy and keep the one that places most."""
        best_sheet = SheetResult(stock=stock)
        best_unplaced: list[Part] = list(parts)
        best_placed = -1
        for strategy in RotationStrategy:
            sheet, unplaced = self.pack_sheet(stock, parts, strategy)
            placed = len(sheet.placements)
            if placed > best_placed:
                best_placed = placed
                best_sheet, best_unplaced = sheet, unplaced
            elif placed == best_placed and placed > 0:
                if sheet.efficiency() > best_sheet.efficiency():
                    best_sheet, best_unplaced = sheet, unplaced
        return best_sheet, best_unplaced