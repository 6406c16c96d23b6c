"""Genetic-algorithm layout search over part order and orientation."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field, replace
from typing import Optional

from slabcut.models import (
    CutSettings,
    Grain,
    OptimizeResult,
    Part,
    Placement,
    SheetResult,
    StockSheet,
    can_place_with_grain,
)
from slabcut.optimizer import Optimizer, add_cutout_free_rects
from slabcut.packer import GuillotinePacker

UNPLACED_PENALTY = 0.2
DEFAULT_SEED = 42


@dataclass
class GeneticConfig:
    """Parameters of the genetic search."""

    population_size: int = 50
    generations: int = 100
    mutation_rate: float = 0.15
    tournament_size: int = 3
    elite_count: int = 2


@dataclass(frozen=True)
class Gene:
    """One placement decision: which part, and whether to prefer rotating it."""

    part_index: int
    rotated: bool = False


@dataclass
class Chromosome:
    """A candidate solution: an ordering of parts with rotation preferences."""

    genes: list[Gene] = field(default_factory=list)
    fitness: float = 0.0


def _copy(chromosome: Chromosome) -> Chromosome:
    return Chromosome(genes=list(chromosome.genes), fitness=chromosome.fitness)


def _expand(items):
    return [replace(item, quantity=1) for item in items for _ in range(item.quantity)]


def _area(part: Part) -> float:
    return part.width * part.height


def _place(packer: GuillotinePacker, part: Part, rotated: bool) -> Optional[Placement]:
    w, h = (part.height, part.width) if rotated else (part.width, part.height)
    pos = packer.insert(w, h)
    if pos is None:
        return None
    return Placement(part=part, x=pos[0], y=pos[1], rotated=rotated)


class GeneticOptimizer:
    """Evolves part orderings and decodes them with the free-rectangle packer."""

    def __init__(
        self,
        settings: CutSettings,
        config: GeneticConfig,
        parts: list[Part],
        stocks: list[StockSheet],
        seed: int = DEFAULT_SEED,
    ) -> None:
        self.settings = settings
        self.config = config
        self.parts = list(parts)
        self.stocks = list(stocks)
        self.rng = random.Random(seed)
        self._fitness_cache: dict[tuple[Gene, ...], float] = {}

    def optimize(self) -> OptimizeResult:
        """Run the evolution and decode the fittest chromosome."""
        if not self.parts or not self.stocks:
            return OptimizeResult()

        population = self._init_population()
        if not population:
            return self.decode(self._greedy_chromosome())

        for chromosome in population:
            chromosome.fitness = self.evaluate(chromosome)

        for _ in range(self.config.generations):
            population.sort(key=lambda c: c.fitness, reverse=True)
            elite = min(self.config.elite_count, len(population))
            next_gen = [_copy(c) for c in population[:elite]]
            while len(next_gen) < self.config.population_size:
                parent1 = self._tournament_select(population)
                parent2 = self._tournament_select(population)
                child = self.order_crossover(parent1, parent2)
                self.mutate(child)
                child.fitness = self.evaluate(child)
                next_gen.append(child)
            population = next_gen

        population.sort(key=lambda c: c.fitness, reverse=True)
        return self.decode(population[0])

    def _init_population(self) -> list[Chromosome]:
        n = len(self.parts)
        population = []
        for _ in range(self.config.population_size):
            genes = []
            for idx in self.rng.sample(range(n), n):
                can_rotate = self.parts[idx].grain == Grain.NONE
                genes.append(Gene(idx, can_rotate and self.rng.random() < 0.5))
            population.append(Chromosome(genes=genes))
        if population:
            population[0] = self._greedy_chromosome()
        return population

    def _greedy_chromosome(self) -> Chromosome:
        order = sorted(
            range(len(self.parts)), key=lambda i: _area(self.parts[i]), reverse=True
        )
        return Chromosome(genes=[Gene(i, False) for i in order])

    def evaluate(self, chromosome: Chromosome) -> float:
        """Weighted multi-objective score of a chromosome, never below zero."""
        key = tuple(chromosome.genes)
        cached = self._fitness_cache.get(key)
        if cached is not None:
            return cached
        fitness = self._score(self.decode(chromosome))
        self._fitness_cache[key] = fitness
        return fitness

    def _score(self, result: OptimizeResult) -> float:
        if not result.sheets:
            return 0.0
        used_area = sum(s.used_area() for s in result.sheets)
        total_area = sum(s.total_area() for s in result.sheets)
        if total_area == 0:
            return 0.0

        w = self.settings.optimize_weights.normalize()
        sheet_count = len(result.sheets)

        efficiency = used_area / total_area
        sheet_score = 1.0 / sheet_count

        cut_len = result.total_cut_length()
        max_cut = math.sqrt(total_area) * 4.0 * sheet_count
        cut_score = 1.0 - min(cut_len / max_cut, 1.0) if max_cut > 0 else 0.0

        passes = 1.0
        if self.settings.pass_depth > 0 and self.settings.cut_depth > 0:
            passes = float(math.ceil(self.settings.cut_depth / self.settings.pass_depth))
        max_work = max_cut * passes
        job_score = 1.0 - min(cut_len * passes / max_work, 1.0) if max_work > 0 else 0.0

        fitness = (
            w.minimize_waste * efficiency
            + w.minimize_sheets * sheet_score
            + w.minimize_cut_len * cut_score
            + w.minimize_job_time * job_score
        )
        fitness -= len(result.unplaced_parts) * UNPLACED_PENALTY
        return max(fitness, 0.0)

    def decode(self, chromosome: Chromosome) -> OptimizeResult:
        """Pack parts in chromosome order, sheet by sheet."""
        pool = _expand(self.stocks)
        remaining = [(self.parts[g.part_index], g.rotated) for g in chromosome.genes]
        opt = Optimizer(self.settings)
        result = OptimizeResult()

        while remaining and pool:
            idx = opt.select_best_stock(pool, [part for part, _ in remaining])
            if idx is None:
                break
            stock = pool.pop(idx)
            sheet = SheetResult(stock=stock)
            tab_config = stock.tabs if stock.tabs.enabled else self.settings.stock_tabs
            packer = GuillotinePacker(
                list(opt.calculate_free_rects(stock, tab_config)),
                self.settings.kerf_width,
            )
            unplaced = []
            for part, prefer in remaining:
                placement = self._place_part(packer, part, prefer, stock)
                if placement is None:
                    unplaced.append((part, prefer))
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
            if sheet.placements:
                result.sheets.append(sheet)
            remaining = unplaced

        result.unplaced_parts = [part for part, _ in remaining]
        return result

    def _place_part(
        self, packer: GuillotinePacker, part: Part, prefer: bool, stock: StockSheet
    ) -> Optional[Placement]:
        can_normal, can_rotated = can_place_with_grain(part.grain, stock.grain)

        if can_normal and can_rotated and part.width != part.height:
            normal_fit = packer.best_fit(part.width, part.height)
            rotated_fit = packer.best_fit(part.height, part.width)
            prefer_rotated = prefer
            if normal_fit is not None and rotated_fit is not None:
                if rotated_fit < normal_fit:
                    prefer_rotated = True
                elif normal_fit < rotated_fit:
                    prefer_rotated = False
            elif normal_fit is None and rotated_fit is not None:
                prefer_rotated = True
            elif rotated_fit is None and normal_fit is not None:
                prefer_rotated = False

            placement = _place(packer, part, True) if prefer_rotated else None
            if placement is None:
                placement = _place(packer, part, False)
            return placement

        rotated_first = prefer and can_rotated
        placement = _place(packer, part, True) if rotated_first else None
        if placement is None and can_normal:
            placement = _place(packer, part, False)
        if placement is None and can_rotated and not rotated_first:
            placement = _place(packer, part, True)
        return placement

    def _tournament_select(self, population: list[Chromosome]) -> Chromosome:
        best = population[self.rng.randrange(len(population))]
        for _ in range(1, self.config.tournament_size):
            candidate = population[self.rng.randrange(len(population))]
            if candidate.fitness > best.fitness:
                best = candidate
        return _copy(best)

    def order_crossover(self, parent1: Chromosome, parent2: Chromosome) -> Chromosome:
        """Order crossover (OX1): keep a segment of parent1, fill from parent2 in order."""
        n = len(parent1.genes)
        if n <= 2:
            return _copy(parent1)
        point1 = self.rng.randrange(n)
        point2 = self.rng.randrange(n)
        if point1 > point2:
            point1, point2 = point2, point1

        genes: list[Optional[Gene]] = [None] * n
        in_segment = set()
        for i in range(point1, point2 + 1):
            genes[i] = parent1.genes[i]
            in_segment.add(parent1.genes[i].part_index)

        pos = (point2 + 1) % n
        for gene in parent2.genes:
            if gene.part_index not in in_segment:
                genes[pos] = gene
                pos = (pos + 1) % n
        return Chromosome(genes=genes)

    def mutate(self, chromosome: Chromosome) -> None:
        """Apply swap, rotation-toggle and inversion mutations in place."""
        genes = chromosome.genes
        n = len(genes)
        if n < 2:
            return
        rate = self.config.mutation_rate

        if self.rng.random() < rate:
            i = self.rng.randrange(n)
            j = self.rng.randrange(n)
            genes[i], genes[j] = genes[j], genes[i]

        if self.rng.random() < rate:
            i = self.rng.randrange(n)
            gene = genes[i]
            if self.parts[gene.part_index].grain == Grain.NONE:
                genes[i] = Gene(gene.part_index, not gene.rotated)

        if self.rng.random() < rate * 0.5:
            i = self.rng.randrange(n)
            j = self.rng.randrange(n)
            if i > j:
                i, j = j, i
            genes[i : j + 1] = reversed(genes[i : j + 1])


def optimize_genetic(
    settings: CutSettings, parts: list[Part], stocks: list[StockSheet]
) -> OptimizeResult:
    """Expand parts by quantity and search for a good layout with a fixed seed."""
    expanded = _expand(parts or [])
    if not expanded or not stocks:
        return OptimizeResult()

    config = GeneticConfig()
    if len(expanded) > 20:
        config.generations = 150
    if len(expanded) > 50:
        config.generations = 200
        config.population_size = 80

    return GeneticOptimizer(settings, config, expanded, list(stocks), DEFAULT_SEED).optimize()