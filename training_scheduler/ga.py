import random
from concurrent.futures import ThreadPoolExecutor
from contextlib import nullcontext
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

import numpy as np

from .config import SchedulerConfig, check_required_options
from .conflicts import detect_conflicts
from .domains import SchedulingContext, filter_feasible
from .evaluation import fitness
from .initial_population import build_initial_population
from .model import Conflict, Individual, Room, ScheduledSession, Trainer, TrainingRequirement
from .operators import clone_individual, mutate, session_crossover, tournament_selection

GenerationCondition = Callable[[Individual, int, Dict[str, float]], bool]


@dataclass
class ScheduleResult:
    result: Individual
    generations: int


class GeneticScheduler:
    def __init__(
        self,
        trainers: Sequence[Trainer],
        rooms: Sequence[Room],
        trainings: Sequence[TrainingRequirement],
        cfg: Optional[SchedulerConfig] = None,
    ):
        self.cfg = cfg or SchedulerConfig()
        self.trainers = list(trainers)
        self.rooms = list(rooms)
        self.report = filter_feasible(trainings, self.trainers, self.rooms, verbose=self.cfg.verbose)
        self.trainings = self.report.feasible
        self.ctx = SchedulingContext.build(self.trainers, self.rooms, self.report, self.cfg)
        self.history: List[Dict] = []

    @property
    def diagnostics(self):
        return self.report.diagnostics

    def detect_conflicts(self, sessions: Sequence[ScheduledSession]) -> List[Conflict]:
        return detect_conflicts(sessions, self.ctx.requirements_by_id)

    @staticmethod
    def _no_conflicts(best: Individual, generation: int, stats: Dict[str, float]) -> bool:
        return stats["best_conflicts"] == 0

    def _evaluate_population(self, population: List[Individual], pool) -> None:
        if pool is None:
            for ind in population:
                fitness(ind, self.ctx)
            return
        # todas las aptitudes se recogen antes de la selección
        scores = list(pool.map(lambda ind: fitness(ind, self.ctx), population))
        for ind, score in zip(population, scores):
            ind.fitness = score

    @staticmethod
    def _stats(population: List[Individual]) -> Dict[str, float]:
        values = np.array([ind.fitness for ind in population], dtype=float)
        return {
            "maximum": float(values.max()),
            "minimum": float(values.min()),
            "mean": float(values.mean()),
            "stdev": float(values.std()),
        }

    def _next_generation(
        self,
        population: List[Individual],
        size: int,
        crossover_rate: float,
        mutation_rate: float,
        rng: random.Random,
    ) -> List[Individual]:
        new_pop: List[Individual] = []
        while len(new_pop) < size:
            p1 = tournament_selection(population, rng)
            p2 = tournament_selection(population, rng)
            if rng.random() < crossover_rate:
                children = session_crossover(p1, p2, rng)
            else:
                children = (clone_individual(p1), clone_individual(p2))
            for child in children:
                if rng.random() < mutation_rate:
                    child = mutate(child, self.ctx, rng)
                new_pop.append(child)
        # sin elitismo: reemplazo total
        return new_pop[:size]

    def find_optimal_schedule(self, options: Dict[str, Any]) -> ScheduleResult:
        check_required_options(options)

        iterations = int(options["iterations"])
        size = int(options["size"])
        crossover_rate = float(options["crossover"])
        mutation_rate = float(options["mutation"])
        if iterations < 1 or size < 1:
            raise ValueError("iterations y size deben ser >= 1")

        skip = options.get("skip") or 10
        verbose = bool(options.get("verbose", False))
        condition: GenerationCondition = options.get("generation_condition") or self._no_conflicts
        notification = options.get("notification")
        cancel_event = options.get("cancel_event")
        workers = int(options.get("workers") or 1)
        rng = random.Random(options.get("seed"))

        self.history = []
        population = build_initial_population(self.ctx, size, rng)
        generation = 0

        pool_ctx = ThreadPoolExecutor(max_workers=workers) if workers > 1 else nullcontext()
        with pool_ctx as pool:
            for generation in range(iterations):
                self._evaluate_population(population, pool)
                population.sort(key=lambda ind: ind.fitness, reverse=True)
                best = population[0]

                stats = self._stats(population)
                stats["best_conflicts"] = len(self.detect_conflicts(best))
                self.history.append({
                    "gen": generation,
                    "best_fitness": stats["maximum"],
                    "avg_fitness": stats["mean"],
                    "best_conflicts": stats["best_conflicts"],
                })

                finished = (
                    bool(condition(best, generation, stats))
                    or (cancel_event is not None and cancel_event.is_set())
                    or generation == iterations - 1
                )
                if verbose and (finished or generation % skip == 0):
                    print(f"Generación {generation}: {stats['maximum']:.2f} (prom: {stats['mean']:.2f})")
                if notification is not None:
                    notification(generation, stats, best, finished)
                if finished:
                    break

                population = self._next_generation(population, size, crossover_rate, mutation_rate, rng)

        best = population[0]
        if verbose:
            print("Finalizado")
            print(f"Número de choques: {len(self.detect_conflicts(best))}")
            print(f"Solución encontrada tras {generation} generaciones")
        return ScheduleResult(result=best, generations=generation)
