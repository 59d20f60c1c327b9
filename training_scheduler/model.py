# training_scheduler/model.py
from dataclasses import dataclass, field
from typing import Hashable, Iterator, List, Tuple

DayIdx = int
SlotIdx = int
SessionId = Tuple[Hashable, int]   # (training_id, occurrence_index)


@dataclass(frozen=True)
class Trainer:
    id: Hashable
    name: str
    available_days: Tuple[DayIdx, ...]


@dataclass(frozen=True)
class Room:
    id: Hashable
    name: str
    capacity: int
    available_days: Tuple[DayIdx, ...]


@dataclass(frozen=True)
class TrainingRequirement:
    id: Hashable
    title: str
    required_occurrences: int
    possible_trainers: Tuple[Hashable, ...]
    possible_rooms: Tuple[Hashable, ...]
    duration: int = 1   # en slots


@dataclass(frozen=True)
class Combination:
    # Tupla legal (docente, aula, día, slot) precalculada para un requisito
    trainer_id: Hashable
    room_id: Hashable
    day: DayIdx
    time_slot: SlotIdx


@dataclass(frozen=True)
class ScheduledSession:
    # Valor inmutable: los operadores construyen sesiones nuevas
    training_id: Hashable
    trainer_id: Hashable
    room_id: Hashable
    day: DayIdx
    time_slot: SlotIdx
    session_id: SessionId

    def same_assignment(self, other: "ScheduledSession") -> bool:
        return (
            self.trainer_id == other.trainer_id
            and self.room_id == other.room_id
            and self.day == other.day
            and self.time_slot == other.time_slot
        )


@dataclass(frozen=True)
class Conflict:
    type: str   # "trainer" | "room"
    sessions: Tuple[ScheduledSession, ScheduledSession]


@dataclass
class Individual:
    sessions: List[ScheduledSession] = field(default_factory=list)
    fitness: float = 0.0

    def __len__(self) -> int:
        return len(self.sessions)

    def __iter__(self) -> Iterator[ScheduledSession]:
        return iter(self.sessions)

    def __getitem__(self, idx: int) -> ScheduledSession:
        return self.sessions[idx]
