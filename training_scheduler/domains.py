# training_scheduler/domains.py
import logging
from dataclasses import dataclass, field
from typing import Dict, Hashable, List, Optional, Sequence

from .config import DAYS, TIME_SLOTS_PER_DAY, SchedulerConfig
from .model import Combination, Room, Trainer, TrainingRequirement

logger = logging.getLogger(__name__)

NO_COMBINATIONS = "no_combinations"
INSUFFICIENT_COMBINATIONS = "insufficient_combinations"


@dataclass(frozen=True)
class FeasibilityDiagnostic:
    requirement_id: Hashable
    title: str
    reason: str
    combination_count: int
    required_occurrences: int
    trainer_availability: Dict[str, List[int]]
    room_availability: Dict[str, List[int]]
    duration: int

    def describe(self) -> str:
        if self.reason == NO_COMBINATIONS:
            trainers = "; ".join(
                f"{name}: días {', '.join(map(str, days))}"
                for name, days in self.trainer_availability.items()
            )
            rooms = "; ".join(
                f"{name}: días {', '.join(map(str, days))}"
                for name, days in self.room_availability.items()
            )
            return (
                f"Sin combinaciones válidas para '{self.title}' "
                f"(docentes: {trainers or '-'} | aulas: {rooms or '-'} | "
                f"duración: {self.duration} slots)"
            )
        return (
            f"Combinaciones insuficientes para '{self.title}': "
            f"{self.combination_count} < {self.required_occurrences} ocurrencias"
        )


@dataclass
class FeasibilityReport:
    feasible: List[TrainingRequirement]
    combinations: Dict[Hashable, List[Combination]]
    diagnostics: List[FeasibilityDiagnostic] = field(default_factory=list)


@dataclass(frozen=True)
class SchedulingContext:
    """Datos de referencia compartidos (solo lectura) durante una ejecución."""
    trainers: List[Trainer]
    rooms: List[Room]
    requirements: List[TrainingRequirement]
    combinations: Dict[Hashable, List[Combination]]
    cfg: SchedulerConfig
    trainers_by_id: Dict[Hashable, Trainer]
    rooms_by_id: Dict[Hashable, Room]
    requirements_by_id: Dict[Hashable, TrainingRequirement]

    @classmethod
    def build(
        cls,
        trainers: Sequence[Trainer],
        rooms: Sequence[Room],
        report: FeasibilityReport,
        cfg: Optional[SchedulerConfig] = None,
    ) -> "SchedulingContext":
        return cls(
            trainers=list(trainers),
            rooms=list(rooms),
            requirements=list(report.feasible),
            combinations=report.combinations,
            cfg=cfg or SchedulerConfig(),
            trainers_by_id={t.id: t for t in trainers},
            rooms_by_id={r.id: r for r in rooms},
            requirements_by_id={r.id: r for r in report.feasible},
        )


def common_days(trainer: Trainer, room: Room) -> List[int]:
    return [d for d in trainer.available_days if d in room.available_days and 0 <= d < DAYS]


def valid_start_slots(duration: int) -> List[int]:
    # start válido si start + duration <= TIME_SLOTS_PER_DAY
    return list(range(0, TIME_SLOTS_PER_DAY - duration + 1))


def build_combinations(
    req: TrainingRequirement,
    trainers_by_id: Dict[Hashable, Trainer],
    rooms_by_id: Dict[Hashable, Room],
) -> List[Combination]:
    starts = valid_start_slots(req.duration)
    out: List[Combination] = []
    for tid in req.possible_trainers:
        trainer = trainers_by_id.get(tid)
        if trainer is None:
            continue
        for rid in req.possible_rooms:
            room = rooms_by_id.get(rid)
            if room is None:
                continue
            for day in common_days(trainer, room):
                for slot in starts:
                    out.append(Combination(tid, rid, day, slot))
    return out


def _diagnose(
    req: TrainingRequirement,
    n_combos: int,
    trainers_by_id: Dict[Hashable, Trainer],
    rooms_by_id: Dict[Hashable, Room],
) -> FeasibilityDiagnostic:
    trainer_av = {
        trainers_by_id[tid].name: list(trainers_by_id[tid].available_days)
        for tid in req.possible_trainers if tid in trainers_by_id
    }
    room_av = {
        rooms_by_id[rid].name: list(rooms_by_id[rid].available_days)
        for rid in req.possible_rooms if rid in rooms_by_id
    }
    return FeasibilityDiagnostic(
        requirement_id=req.id,
        title=req.title,
        reason=NO_COMBINATIONS if n_combos == 0 else INSUFFICIENT_COMBINATIONS,
        combination_count=n_combos,
        required_occurrences=req.required_occurrences,
        trainer_availability=trainer_av,
        room_availability=room_av,
        duration=req.duration,
    )


def filter_feasible(
    requirements: Sequence[TrainingRequirement],
    trainers: Sequence[Trainer],
    rooms: Sequence[Room],
    verbose: bool = False,
) -> FeasibilityReport:
    """
    Descarta los requisitos sin combinaciones suficientes.

    Es una cota inferior: solo comprueba que existan al menos
    ``required_occurrences`` combinaciones, no que exista una asignación
    sin conflictos.
    """
    trainers_by_id = {t.id: t for t in trainers}
    rooms_by_id = {r.id: r for r in rooms}

    feasible: List[TrainingRequirement] = []
    combinations: Dict[Hashable, List[Combination]] = {}
    diagnostics: List[FeasibilityDiagnostic] = []

    for req in requirements:
        combos = build_combinations(req, trainers_by_id, rooms_by_id)
        if combos and len(combos) >= req.required_occurrences:
            if verbose:
                logger.info(
                    "'%s': %d combinaciones válidas para %d ocurrencias",
                    req.title, len(combos), req.required_occurrences,
                )
            feasible.append(req)
            combinations[req.id] = combos
            continue

        diag = _diagnose(req, len(combos), trainers_by_id, rooms_by_id)
        diagnostics.append(diag)
        logger.warning("%s. Se excluye de la planificación.", diag.describe())

    if verbose:
        logger.info(
            "Descartados %d de %d requisitos", len(requirements) - len(feasible), len(requirements)
        )
    return FeasibilityReport(feasible=feasible, combinations=combinations, diagnostics=diagnostics)
