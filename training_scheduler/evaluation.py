# training_scheduler/evaluation.py
import logging
from collections import Counter
from collections.abc import Hashable
from dataclasses import dataclass
from numbers import Integral
from typing import Any, List, Optional

from .conflicts import detect_conflicts
from .domains import SchedulingContext
from .model import Conflict, Individual, ScheduledSession

logger = logging.getLogger(__name__)

MIN_FITNESS = 0.0


@dataclass
class EvaluationResult:
    fitness: float
    base: float
    penalty: float
    coverage: float
    utilization: float
    conflicts: List[Conflict]


def _well_formed(s: ScheduledSession) -> bool:
    ids_ok = all(isinstance(v, Hashable) for v in (s.training_id, s.trainer_id, s.room_id))
    slots_ok = all(isinstance(v, Integral) and not isinstance(v, bool) for v in (s.day, s.time_slot))
    return ids_ok and slots_ok


def _as_sessions(candidate: Any) -> Optional[List[ScheduledSession]]:
    """Devuelve la lista de sesiones o None si la entrada está mal formada."""
    if isinstance(candidate, Individual):
        candidate = candidate.sessions
    if not isinstance(candidate, (list, tuple)):
        return None
    if not all(isinstance(s, ScheduledSession) and _well_formed(s) for s in candidate):
        return None
    return list(candidate)


def evaluate(candidate: Any, ctx: SchedulingContext) -> Optional[EvaluationResult]:
    """
    Desglose de la aptitud (a maximizar):

        base - choques*1000 + cobertura*20 + utilización*5

    El total puede ser negativo; la selección solo usa el orden relativo.
    Retorna None si la entrada no es una secuencia de sesiones válida.
    """
    cfg = ctx.cfg
    sessions = _as_sessions(candidate)
    if sessions is None or any(s.training_id not in ctx.requirements_by_id for s in sessions):
        logger.debug("Individuo mal formado, aptitud mínima")
        return None

    conflicts = detect_conflicts(sessions, ctx.requirements_by_id)
    base = len(sessions) * cfg.session_weight
    penalty = len(conflicts) * cfg.conflict_penalty

    scheduled = Counter(s.training_id for s in sessions)
    coverage = 0.0
    for req in ctx.requirements:
        ratio = scheduled[req.id] / req.required_occurrences
        if cfg.clamp_coverage:
            ratio = min(ratio, 1.0)
        coverage += ratio

    trainer_util = len({s.trainer_id for s in sessions}) / len(ctx.trainers) if ctx.trainers else 0.0
    room_util = len({s.room_id for s in sessions}) / len(ctx.rooms) if ctx.rooms else 0.0
    utilization = (trainer_util + room_util) / 2

    fitness = (
        base
        - penalty
        + coverage * cfg.coverage_weight
        + utilization * cfg.utilization_weight
    )
    if isinstance(candidate, Individual):
        candidate.fitness = fitness

    return EvaluationResult(
        fitness=fitness,
        base=base,
        penalty=penalty,
        coverage=coverage,
        utilization=utilization,
        conflicts=conflicts,
    )


def fitness(candidate: Any, ctx: SchedulingContext) -> float:
    res = evaluate(candidate, ctx)
    if res is None:
        if isinstance(candidate, Individual):
            candidate.fitness = MIN_FITNESS
        return MIN_FITNESS
    return res.fitness
