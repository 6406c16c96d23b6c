from dataclasses import replace

from slabcut.compare import (
    ComparisonScenario,
    build_default_scenarios,
    compare_scenarios,
)
from slabcut.models import Algorithm, Part, StockSheet, default_settings


def test_compare_basic():
    parts = [
        Part(id="p1", label="A", width=400, height=300, quantity=2),
        Part(id="p2", label="B", width=200, height=150, quantity=3),
    ]
    stocks = [StockSheet(id="s1", label="Board", width=2440, height=1220, quantity=2)]
    base = default_settings()
    scenarios = [
        ComparisonScenario("Guillotine", base),
        ComparisonScenario("Genetic", replace(base, algorithm=Algorithm.GENETIC)),
    ]
    results = compare_scenarios(scenarios, parts, stocks)
    assert len(results) == 2
    for scenario, r in zip(scenarios, results):
        assert r.scenario.name == scenario.name
        assert r.sheets_used > 0
        assert r.total_cuts == 5
        assert 0 <= r.waste_percent <= 100
        assert r.unplaced_count == 0


def test_compare_empty():
    assert compare_scenarios([], [], []) == []


def test_default_scenarios_guillotine():
    base = default_settings()
    base.algorithm = Algorithm.GUILLOTINE
    scenarios = build_default_scenarios(base)
    assert len(scenarios) >= 2
    assert scenarios[0].name == "Current Settings"
    genetic = [s for s in scenarios if s.name == "Genetic Algorithm"]
    assert len(genetic) == 1
    assert genetic[0].settings.algorithm == Algorithm.GENETIC
    assert base.algorithm == Algorithm.GUILLOTINE


def test_default_scenarios_genetic():
    base = default_settings()
    base.algorithm = Algorithm.GENETIC
    names = [s.name for s in build_default_scenarios(base)]
    assert "Guillotine Algorithm" in names


def test_default_scenarios_full_set():
    base = default_settings()
    base.kerf_width = 3.0
    base.edge_trim = 10.0
    scenarios = build_default_scenarios(base)
    assert [s.name for s in scenarios] == [
        "Current Settings",
        "Genetic Algorithm",
        "Kerf 1.5mm (half)",
        "No Edge Trim",
    ]
    assert scenarios[2].settings.kerf_width == 1.5
    assert scenarios[3].settings.edge_trim == 0.0
    assert base.edge_trim == 10.0


def test_default_scenarios_thin_kerf_no_trim():
    base = default_settings()
    base.kerf_width = 1.0
    base.edge_trim = 0.0
    names = [s.name for s in build_default_scenarios(base)]
    assert names == ["Current Settings", "Genetic Algorithm"]


def test_compare_unplaced_parts():
    parts = [Part(id="p1", label="Huge", width=5000, height=5000)]
    stocks = [StockSheet(id="s1", label="Small", width=100, height=100)]
    results = compare_scenarios(
        [ComparisonScenario("Test", default_settings())], parts, stocks
    )
    assert len(results) == 1
    assert results[0].unplaced_count == 1
    assert results[0].sheets_used == 0