from itertools import combinations

import pytest

from slabcut.models import TabZone
from slabcut.packer import (
    GuillotinePacker,
    Rect,
    contains_rect,
    prune_contained,
    rects_intersect,
    rects_overlap,
    subtract_exclusions,
    subtract_rect,
)


def sheet_packer(w, h, kerf=0.0):
    return GuillotinePacker([Rect(0, 0, w, h)], kerf)


def test_insert_first_piece_at_origin():
    packer = sheet_packer(100, 100)
    assert packer.insert(50, 50) == (0, 0)
    assert packer.free_rects == [Rect(50, 0, 50, 100), Rect(0, 50, 100, 50)]


def test_insert_second_piece_takes_first_best_fit():
    packer = sheet_packer(100, 100)
    packer.insert(50, 50)
    assert packer.insert(50, 50) == (50, 0)


def test_insert_too_large_returns_none():
    packer = sheet_packer(100, 100)
    assert packer.insert(101, 50) is None
    assert packer.free_rects == [Rect(0, 0, 100, 100)]


def test_kerf_counts_toward_fit():
    assert sheet_packer(100, 100, kerf=3.0).insert(97, 97) == (0, 0)
    assert sheet_packer(100, 100, kerf=3.0).insert(98, 97) is None


def test_best_fit_does_not_change_packer():
    packer = sheet_packer(100, 100)
    assert packer.best_fit(50, 40) == pytest.approx(10000 - 2000)
    assert packer.free_rects == [Rect(0, 0, 100, 100)]
    assert packer.best_fit(200, 10) is None


def test_rotation_fills_bottom_strip():
    packer = sheet_packer(500, 500)
    positions = [packer.insert(100, 400) for _ in range(5)]
    assert positions == [(0, 0), (100, 0), (200, 0), (300, 0), (400, 0)]
    assert packer.free_rects == [Rect(0, 400, 500, 100)]
    assert packer.insert(100, 400) is None
    assert packer.insert(400, 100) == (0, 400)


def test_add_free_rect_makes_space_available():
    packer = sheet_packer(100, 100)
    assert packer.insert(100, 100) == (0, 0)
    assert packer.insert(20, 20) is None
    packer.add_free_rect(Rect(200, 200, 30, 30))
    assert packer.insert(20, 20) == (200, 200)


def test_placements_never_overlap():
    packer = sheet_packer(1000, 600, kerf=3.0)
    sizes = [(300, 200), (250, 250), (400, 100), (100, 100), (200, 300)]
    positions = [packer.insert(w, h) for w, h in sizes]
    assert None not in positions
    assert positions[0] == (0, 0)
    placed = [Rect(x, y, w, h) for (x, y), (w, h) in zip(positions, sizes)]
    assert len(placed) == 5
    assert all(
        r.x >= 0 and r.y >= 0 and r.x + r.w <= 1000 and r.y + r.h <= 600
        for r in placed
    )
    assert not any(rects_overlap(a, b) for a, b in combinations(placed, 2))


def test_rects_overlap_ignores_touching():
    assert rects_overlap(Rect(0, 0, 10, 10), Rect(5, 5, 10, 10))
    assert not rects_overlap(Rect(0, 0, 10, 10), Rect(10, 0, 10, 10))


def test_contains_rect_with_tolerance():
    assert contains_rect(Rect(0, 0, 10, 10), Rect(2, 2, 5, 5))
    assert contains_rect(Rect(0, 0, 10, 10), Rect(0, 0, 10.0005, 10))
    assert not contains_rect(Rect(0, 0, 10, 10), Rect(5, 5, 10, 10))


def test_prune_contained_removes_inner():
    outer = Rect(0, 0, 100, 100)
    inner = Rect(10, 10, 20, 20)
    other = Rect(200, 0, 10, 10)
    assert prune_contained([outer, inner, other]) == [outer, other]


def test_prune_contained_drops_identical_pair():
    r = Rect(0, 0, 10, 10)
    assert prune_contained([r, r]) == []
    assert prune_contained([r]) == [r]


def test_rects_intersect_strict():
    assert rects_intersect(Rect(0, 0, 10, 10), Rect(9, 9, 5, 5))
    assert not rects_intersect(Rect(0, 0, 10, 10), Rect(10, 10, 5, 5))


def test_subtract_rect_corner():
    result = subtract_rect(Rect(0, 0, 100, 100), Rect(0, 0, 20, 20))
    assert result == [Rect(20, 0, 80, 100), Rect(0, 20, 20, 80)]


def test_subtract_rect_disjoint_returns_base():
    base = Rect(0, 0, 100, 100)
    assert subtract_rect(base, Rect(200, 200, 10, 10)) == [base]


def test_subtract_rect_full_cover_leaves_nothing():
    assert subtract_rect(Rect(10, 10, 50, 50), Rect(0, 0, 100, 100)) == []


def test_subtract_rect_centre_hole():
    result = subtract_rect(Rect(0, 0, 100, 100), Rect(40, 40, 20, 20))
    assert result == [
        Rect(0, 0, 40, 100),
        Rect(60, 0, 40, 100),
        Rect(40, 0, 20, 40),
        Rect(40, 60, 20, 40),
    ]


def test_subtract_exclusions_clamp_leaves_bottom_strip():
    result = subtract_exclusions(Rect(0, 0, 500, 500), [TabZone(0, 0, 500, 400)])
    assert result == [Rect(0, 400, 500, 100)]


def test_subtract_exclusions_ignores_zone_covering_everything():
    base = Rect(0, 0, 10, 10)
    assert subtract_exclusions(base, [TabZone(0, 0, 50, 50)]) == [base]


def test_subtract_exclusions_filters_slivers():
    result = subtract_exclusions(Rect(0, 0, 100, 100), [TabZone(0, 0, 99.5, 100)])
    assert result == []


def test_subtract_exclusions_four_corners_keep_centre_free():
    zones = [
        TabZone(0, 0, 100, 100),
        TabZone(900, 0, 100, 100),
        TabZone(0, 500, 100, 100),
        TabZone(900, 500, 100, 100),
    ]
    free = subtract_exclusions(Rect(0, 0, 1000, 600), zones)
    assert free
    for r in free:
        for z in zones:
            assert not rects_intersect(r, Rect(z.x, z.y, z.width, z.height))
    packer = GuillotinePacker(free, 0.0)
    pos = packer.insert(300, 200)
    assert pos is not None
    placed = Rect(pos[0], pos[1], 300, 200)
    for z in zones:
        assert not rects_intersect(placed, Rect(z.x, z.y, z.width, z.height))