import random
from dataclasses import replace
from typing import Dict, List, Tuple

from .config import DAYS, TIME_SLOTS_PER_DAY
from .domains import SchedulingContext, common_days
from .model import Individual, ScheduledSession, SessionId

# Umbrales acumulados de los cuatro tipos de mutación
RETIME_P = 0.33
REROOM_P = 0.66
RETRAIN_P = 0.9


def tournament_selection(population: List[Individual], rng: random.Random) -> Individual:
    """Torneo de 2: se toman dos al azar y gana el de mayor aptitud."""
    a = rng.choice(population)
    b = rng.choice(population)
    return a if a.fitness >= b.fitness else b


def _copy(s: ScheduledSession) -> ScheduledSession:
    return replace(s)


def clone_individual(ind: Individual) -> Individual:
    return Individual(sessions=[_copy(s) for s in ind.sessions], fitness=ind.fitness)


def session_crossover(
    mother: Individual,
    father: Individual,
    rng: random.Random,
) -> Tuple[Individual, Individual]:
    """
    Cruce por identidad de sesión.

    Las sesiones se emparejan por ``session_id``. Las que solo existen en un
    progenitor se descartan; las idénticas pasan a ambos hijos; las que
    difieren se reparten al azar (moneda independiente por sesión). Los hijos
    siguen el orden de la madre.
    """
    mother_by_id: Dict[SessionId, ScheduledSession] = {s.session_id: s for s in mother.sessions}
    father_by_id: Dict[SessionId, ScheduledSession] = {s.session_id: s for s in father.sessions}

    child1: List[ScheduledSession] = []
    child2: List[ScheduledSession] = []
    for sid, m in mother_by_id.items():
        f = father_by_id.get(sid)
        if f is None:
            continue
        if m.same_assignment(f):
            child1.append(_copy(m))
            child2.append(_copy(m))
        elif rng.random() < 0.5:
            child1.append(_copy(m))
            child2.append(_copy(f))
        else:
            child1.append(_copy(f))
            child2.append(_copy(m))
    return Individual(sessions=child1), Individual(sessions=child2)


def _retime(s: ScheduledSession, ctx: SchedulingContext, rng: random.Random) -> ScheduledSession:
    req = ctx.requirements_by_id[s.training_id]
    max_start = TIME_SLOTS_PER_DAY - req.duration
    if max_start < 0:
        return _copy(s)
    return replace(s, time_slot=rng.randint(0, max_start))


def _reroom(s: ScheduledSession, ctx: SchedulingContext, rng: random.Random) -> ScheduledSession:
    req = ctx.requirements_by_id[s.training_id]
    if not req.possible_rooms:
        return _copy(s)
    return replace(s, room_id=rng.choice(req.possible_rooms))


def _retrain(s: ScheduledSession, ctx: SchedulingContext, rng: random.Random) -> ScheduledSession:
    req = ctx.requirements_by_id[s.training_id]
    if not req.possible_trainers:
        return _copy(s)
    return replace(s, trainer_id=rng.choice(req.possible_trainers))


def _reday(s: ScheduledSession, ctx: SchedulingContext, rng: random.Random) -> ScheduledSession:
    if not ctx.cfg.constrain_reday:
        # sin revisar la disponibilidad de docente/aula
        return replace(s, day=rng.randrange(DAYS))
    trainer = ctx.trainers_by_id.get(s.trainer_id)
    room = ctx.rooms_by_id.get(s.room_id)
    days = common_days(trainer, room) if trainer and room else []
    if not days:
        return _copy(s)
    return replace(s, day=rng.choice(days))


def mutate(ind: Individual, ctx: SchedulingContext, rng: random.Random) -> Individual:
    """Devuelve un individuo nuevo con una sola sesión modificada."""
    sessions = list(ind.sessions)
    if not sessions:
        return Individual(sessions=sessions)

    kind = rng.random()
    idx = rng.randrange(len(sessions))
    if kind < RETIME_P:
        op = _retime
    elif kind < REROOM_P:
        op = _reroom
    elif kind < RETRAIN_P:
        op = _retrain
    else:
        op = _reday
    sessions[idx] = op(sessions[idx], ctx, rng)
    return Individual(sessions=sessions)
