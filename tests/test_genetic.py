from dataclasses import replace

from slabcut.genetic import (
    Chromosome,
    Gene,
    GeneticConfig,
    GeneticOptimizer,
    optimize_genetic,
)
from slabcut.models import (
    Algorithm,
    Grain,
    Part,
    StockSheet,
    default_settings,
)
from slabcut.optimizer import Optimizer


def make_parts():
    return [
        Part(id="p1", label="A", width=400, height=300, quantity=1),
        Part(id="p2", label="B", width=200, height=150, quantity=2),
        Part(id="p3", label="C", width=500, height=400, quantity=1),
    ]


def make_stock():
    return [StockSheet(id="s1", label="Sheet", width=2440, height=1220, quantity=2)]


def make_settings():
    s = default_settings()
    s.algorithm = Algorithm.GENETIC
    s.kerf_width = 3.0
    s.edge_trim = 10.0
    s.stock_tabs.enabled = False
    return s


def placed_count(result):
    return sum(len(s.placements) for s in result.sheets)


def single_parts(n):
    return [
        Part(id=f"p{i}", label=chr(ord("A") + i), width=100 * (i + 1), height=100 * (i + 1))
        for i in range(n)
    ]


def test_places_all_parts():
    result = optimize_genetic(make_settings(), make_parts(), make_stock())
    assert placed_count(result) == 4
    assert result.unplaced_parts == []


def test_efficiency_positive():
    result = optimize_genetic(make_settings(), make_parts(), make_stock())
    assert result.total_efficiency() > 0


def test_respects_grain_direction():
    parts = [
        Part(id="g1", label="GrainH", width=600, height=300, grain=Grain.HORIZONTAL),
        Part(id="g2", label="GrainV", width=400, height=200, grain=Grain.VERTICAL),
    ]
    result = optimize_genetic(make_settings(), parts, make_stock())
    placements = [p for s in result.sheets for p in s.placements]
    assert len(placements) == 2
    assert all(not p.rotated for p in placements if p.part.grain != Grain.NONE)


def test_empty_inputs():
    assert optimize_genetic(make_settings(), [], make_stock()).sheets == []
    assert optimize_genetic(make_settings(), make_parts(), []).sheets == []


def test_at_least_as_good_as_greedy():
    parts = [
        Part(id="p1", label="A", width=600, height=400, quantity=3),
        Part(id="p2", label="B", width=300, height=200, quantity=4),
        Part(id="p3", label="C", width=450, height=350, quantity=2),
        Part(id="p4", label="D", width=150, height=100, quantity=6),
    ]
    stocks = [StockSheet(id="s1", label="Sheet", width=2440, height=1220, quantity=5)]
    settings = default_settings()
    settings.kerf_width = 3.0
    settings.edge_trim = 10.0
    settings.stock_tabs.enabled = False
    settings.algorithm = Algorithm.GUILLOTINE

    greedy = Optimizer(settings).optimize(parts, stocks)
    genetic = optimize_genetic(settings, parts, stocks)
    assert placed_count(genetic) >= placed_count(greedy)


def test_dispatch_through_optimizer():
    result = Optimizer(make_settings()).optimize(make_parts(), make_stock())
    assert placed_count(result) == 4


def test_order_crossover_preserves_all_genes():
    ga = GeneticOptimizer(make_settings(), GeneticConfig(), single_parts(5), make_stock(), 123)
    parent1 = Chromosome(genes=[Gene(i) for i in range(5)])
    parent2 = Chromosome(genes=[Gene(i) for i in reversed(range(5))])
    child = ga.order_crossover(parent1, parent2)
    assert len(child.genes) == 5
    assert sorted(g.part_index for g in child.genes) == [0, 1, 2, 3, 4]


def test_order_crossover_small_returns_copy_of_first_parent():
    ga = GeneticOptimizer(make_settings(), GeneticConfig(), single_parts(2), make_stock(), 1)
    parent1 = Chromosome(genes=[Gene(1), Gene(0)], fitness=0.7)
    parent2 = Chromosome(genes=[Gene(0), Gene(1)])
    child = ga.order_crossover(parent1, parent2)
    assert child.genes == parent1.genes
    assert child.fitness == 0.7
    assert child.genes is not parent1.genes


def test_part_too_large_for_stock():
    parts = [Part(id="big", label="TooBig", width=5000, height=3000)]
    stocks = [StockSheet(id="s1", label="Small", width=1000, height=500)]
    result = optimize_genetic(make_settings(), parts, stocks)
    assert len(result.unplaced_parts) == 1
    assert result.sheets == []


def test_mutate_keeps_permutation():
    config = GeneticConfig(mutation_rate=1.0)
    ga = GeneticOptimizer(make_settings(), config, single_parts(6), make_stock(), 7)
    chrom = Chromosome(genes=[Gene(i) for i in range(6)])
    for _ in range(20):
        ga.mutate(chrom)
    assert sorted(g.part_index for g in chrom.genes) == list(range(6))


def test_mutate_never_rotates_grain_parts():
    parts = [replace(p, grain=Grain.HORIZONTAL) for p in single_parts(4)]
    config = GeneticConfig(mutation_rate=1.0)
    ga = GeneticOptimizer(make_settings(), config, parts, make_stock(), 3)
    chrom = Chromosome(genes=[Gene(i) for i in range(4)])
    for _ in range(30):
        ga.mutate(chrom)
    assert all(not g.rotated for g in chrom.genes)


def test_evaluate_zero_when_nothing_fits():
    parts = [Part(id="big", label="Big", width=5000, height=5000)]
    stocks = [StockSheet(id="s", label="S", width=100, height=100)]
    ga = GeneticOptimizer(make_settings(), GeneticConfig(), parts, stocks, 1)
    assert ga.evaluate(Chromosome(genes=[Gene(0)])) == 0.0


def test_evaluate_single_sheet_score_in_range():
    ga = GeneticOptimizer(make_settings(), GeneticConfig(), single_parts(3), make_stock(), 1)
    fitness = ga.evaluate(Chromosome(genes=[Gene(2), Gene(1), Gene(0)]))
    assert 0.0 < fitness <= 1.0


def test_decode_places_parts_in_order():
    ga = GeneticOptimizer(make_settings(), GeneticConfig(), single_parts(3), make_stock(), 1)
    result = ga.decode(Chromosome(genes=[Gene(2), Gene(1), Gene(0)]))
    labels = [p.part.label for s in result.sheets for p in s.placements]
    assert labels == ["C", "B", "A"]
    assert result.unplaced_parts == []


def test_small_config_optimize_is_deterministic():
    config = GeneticConfig(population_size=6, generations=4)
    first = GeneticOptimizer(make_settings(), config, single_parts(4), make_stock(), 5).optimize()
    second = GeneticOptimizer(make_settings(), config, single_parts(4), make_stock(), 5).optimize()
    assert first == second
    assert placed_count(first) == 4