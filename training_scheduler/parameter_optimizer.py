"""
Búsqueda de parámetros del algoritmo genético en dos fases.

Fase 1: rejilla gruesa; se registran choques, tiempo y generaciones por
combinación. Fase 2: cada combinación sin choques se repite varias veces para
medir su fiabilidad (tasa de éxito, tiempo y generaciones medias).
"""
import logging
import time
from dataclasses import dataclass, field
from itertools import product
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from .config import SchedulerConfig
from .conflicts import detect_conflicts
from .data_loader import DataBundle
from .ga import GeneticScheduler

logger = logging.getLogger(__name__)

PHASE_1_CONFIG: Dict[str, List[Any]] = {
    "iterations": [500],
    "size": [125],
    "crossover": [0.5],
    "mutation": [0.6, 0.7, 0.8, 0.9],
}

RELIABILITY_RUNS = 10
MAX_RELIABILITY_CANDIDATES = 10
PARAM_KEYS = ["iterations", "size", "crossover", "mutation"]


@dataclass
class OptimizationReport:
    phase1: pd.DataFrame
    phase2: pd.DataFrame
    recommended: Optional[Dict[str, Any]] = None
    raw_phase1: List[Dict[str, Any]] = field(default_factory=list)


def generate_phase1_combinations(grid: Optional[Dict[str, List[Any]]] = None) -> List[Dict[str, Any]]:
    grid = grid or PHASE_1_CONFIG
    combinations = []
    for iterations, size, crossover, mutation in product(*(grid[k] for k in PARAM_KEYS)):
        combinations.append({
            "iterations": iterations,
            "size": size,
            "crossover": crossover,
            "mutation": mutation,
            "skip": 1000,
            "verbose": False,
        })
    return combinations


def run_test(params: Dict[str, Any], data: DataBundle) -> Dict[str, Any]:
    scheduler = GeneticScheduler(data.trainers, data.rooms, data.trainings, SchedulerConfig(verbose=False))

    start = time.perf_counter()
    res = scheduler.find_optimal_schedule(params)
    elapsed = time.perf_counter() - start

    conflicts = detect_conflicts(res.result, scheduler.trainings)
    return {
        "params": params,
        "generations": res.generations,
        "conflicts": len(conflicts),
        "time": elapsed,
        "conflicts_free": len(conflicts) == 0,
    }


def run_tests(combinations: List[Dict[str, Any]], phase: int, data: DataBundle) -> List[Dict[str, Any]]:
    results = []
    total = len(combinations)
    logger.info("Fase %d: probando %d combinaciones de parámetros", phase, total)

    for n, params in enumerate(combinations, start=1):
        label = ", ".join(f"{k}={params[k]}" for k in PARAM_KEYS)
        try:
            result = run_test(params, data)
        except Exception:
            logger.exception("Error probando parámetros: %s", label)
            continue
        results.append(result)
        logger.info(
            "Prueba %d/%d (%s): choques=%d tiempo=%.2fs",
            n, total, label, result["conflicts"], result["time"],
        )

    results.sort(key=lambda r: (r["conflicts"], r["time"]))
    return results


def _reliability(params: Dict[str, Any], data: DataBundle, runs: int, base_seed: Optional[int]) -> Dict[str, Any]:
    outcomes = []
    for i in range(runs):
        run_params = dict(params)
        if base_seed is not None:
            run_params["seed"] = base_seed + i
        outcomes.append(run_test(run_params, data))

    success = sum(1 for o in outcomes if o["conflicts_free"])
    return {
        **{k: params[k] for k in PARAM_KEYS},
        "success_count": success,
        "success_rate": success / runs,
        "avg_time": float(np.mean([o["time"] for o in outcomes])),
        "avg_generations": float(np.mean([o["generations"] for o in outcomes])),
    }


def optimize_parameters(
    data: DataBundle,
    grid: Optional[Dict[str, List[Any]]] = None,
    runs: int = RELIABILITY_RUNS,
    top: int = MAX_RELIABILITY_CANDIDATES,
    base_seed: Optional[int] = None,
) -> OptimizationReport:
    combinations = generate_phase1_combinations(grid)
    if base_seed is not None:
        for i, params in enumerate(combinations):
            params["seed"] = base_seed + i
    phase1_results = run_tests(combinations, 1, data)

    phase1 = pd.DataFrame(
        [
            {**{k: r["params"][k] for k in PARAM_KEYS},
             "conflicts": r["conflicts"], "time": r["time"], "generations": r["generations"]}
            for r in phase1_results
        ],
        columns=PARAM_KEYS + ["conflicts", "time", "generations"],
    )

    conflict_free = phase1[phase1["conflicts"] == 0].sort_values("time").head(top)
    phase2_cols = PARAM_KEYS + ["success_count", "success_rate", "avg_time", "avg_generations"]
    if conflict_free.empty:
        logger.warning("Ninguna combinación sin choques en la fase 1; amplíe el espacio de búsqueda.")
        return OptimizationReport(phase1=phase1, phase2=pd.DataFrame(columns=phase2_cols), raw_phase1=phase1_results)

    logger.info("Fase 2: fiabilidad de %d combinaciones (%d ejecuciones cada una)", len(conflict_free), runs)
    reliability = []
    for row in conflict_free.to_dict("records"):
        params = {k: row[k] for k in PARAM_KEYS}
        params.update(skip=1000, verbose=False)
        rel = _reliability(params, data, runs, base_seed)
        logger.info(
            "%s: %d/%d sin choques, tiempo medio %.2fs",
            params, rel["success_count"], runs, rel["avg_time"],
        )
        reliability.append(rel)

    phase2 = pd.DataFrame(reliability, columns=phase2_cols).sort_values(
        ["success_rate", "avg_time"], ascending=[False, True]
    ).reset_index(drop=True)

    recommended = None
    if phase2.loc[0, "success_rate"] > 0:
        recommended = {k: phase2.loc[0, k] for k in PARAM_KEYS + ["success_rate", "avg_time"]}
    return OptimizationReport(phase1=phase1, phase2=phase2, recommended=recommended, raw_phase1=phase1_results)
