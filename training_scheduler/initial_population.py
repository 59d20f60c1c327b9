# training_scheduler/initial_population.py
import random
from typing import List

from .config import SchedulingInvariantError
from .domains import SchedulingContext
from .model import Individual, ScheduledSession


def build_random_individual(ctx: SchedulingContext, rng: random.Random) -> Individual:
    sessions: List[ScheduledSession] = []
    for req in ctx.requirements:
        combos = ctx.combinations.get(req.id)
        if not combos:
            raise SchedulingInvariantError(
                f"El requisito '{req.title}' no tiene combinaciones tras el filtrado"
            )
        # muestreo con reemplazo: se permiten duplicados
        for occurrence in range(req.required_occurrences):
            combo = rng.choice(combos)
            sessions.append(
                ScheduledSession(
                    training_id=req.id,
                    trainer_id=combo.trainer_id,
                    room_id=combo.room_id,
                    day=combo.day,
                    time_slot=combo.time_slot,
                    session_id=(req.id, occurrence),
                )
            )
    return Individual(sessions=sessions)


def build_initial_population(
    ctx: SchedulingContext,
    pop_size: int,
    rng: random.Random,
) -> List[Individual]:
    return [build_random_individual(ctx, rng) for _ in range(pop_size)]
