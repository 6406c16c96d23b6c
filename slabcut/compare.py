"""Side-by-side comparison of optimisation runs with different settings."""

from __future__ import annotations

from dataclasses import dataclass, replace

from slabcut.models import Algorithm, CutSettings, OptimizeResult, Part, StockSheet
from slabcut.optimizer import Optimizer


@dataclass
class ComparisonScenario:
    """A named set of settings to try."""

    name: str
    settings: CutSettings


@dataclass
class ComparisonResult:
    """The result of one scenario with summary statistics."""

    scenario: ComparisonScenario
    result: OptimizeResult
    sheets_used: int
    total_cuts: int
    waste_percent: float
    unplaced_count: int


def compare_scenarios(
    scenarios: list[ComparisonScenario],
    parts: list[Part],
    stocks: list[StockSheet],
) -> list[ComparisonResult]:
    """Optimise once per scenario, returning results in scenario order."""
    results = []
    for scenario in scenarios or []:
        result = Optimizer(scenario.settings).optimize(parts or [], stocks or [])
        results.append(
            ComparisonResult(
                scenario=scenario,
                result=result,
                sheets_used=len(result.sheets),
                total_cuts=sum(len(s.placements) for s in result.sheets),
                waste_percent=100.0 - result.total_efficiency(),
                unplaced_count=len(result.unplaced_parts),
            )
        )
    return results


def build_default_scenarios(base_settings: CutSettings) -> list[ComparisonScenario]:
    """Current settings plus what-if variants: other algorithm, half kerf, no trim."""
    scenarios = [ComparisonScenario("Current Settings", base_settings)]

    if base_settings.algorithm == Algorithm.GUILLOTINE:
        scenarios.append(
            ComparisonScenario(
                "Genetic Algorithm", replace(base_settings, algorithm=Algorithm.GENETIC)
            )
        )
    else:
        scenarios.append(
            ComparisonScenario(
                "Guillotine Algorithm",
                replace(base_settings, algorithm=Algorithm.GUILLOTINE),
            )
        )

    if base_settings.kerf_width > 1.0:
        half = base_settings.kerf_width * 0.5
        scenarios.append(
            ComparisonScenario(
                f"Kerf {half:.1f}mm (half)", replace(base_settings, kerf_width=half)
            )
        )

    if base_settings.edge_trim > 0:
        scenarios.append(
            ComparisonScenario("No Edge Trim", replace(base_settings, edge_trim=0.0))
        )

    return scenarios