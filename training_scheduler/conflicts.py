"""
Detección de choques entre sesiones programadas.

Dos sesiones chocan si caen el mismo día y sus intervalos semiabiertos
``[slot, slot + duración)`` se solapan. Un mismo par puede producir un choque
de docente, uno de aula, ambos o ninguno.
"""
from typing import Dict, Hashable, Iterable, List, Sequence, Union

from .model import Conflict, ScheduledSession, TrainingRequirement


def _durations(
    requirements: Union[Iterable[TrainingRequirement], Dict[Hashable, TrainingRequirement]],
) -> Dict[Hashable, int]:
    if isinstance(requirements, dict):
        return {rid: req.duration for rid, req in requirements.items()}
    return {req.id: req.duration for req in requirements}


def overlaps(start1: int, len1: int, start2: int, len2: int) -> bool:
    return start1 < start2 + len2 and start2 < start1 + len1


def detect_conflicts(
    sessions: Sequence[ScheduledSession],
    requirements: Union[Iterable[TrainingRequirement], Dict[Hashable, TrainingRequirement]],
) -> List[Conflict]:
    durations = _durations(requirements)
    sessions = list(sessions)

    lengths: List[int] = []
    for s in sessions:
        if s.training_id not in durations:
            raise ValueError(f"Sesión {s.session_id} referencia un requisito desconocido: {s.training_id}")
        lengths.append(durations[s.training_id])

    conflicts: List[Conflict] = []
    for i in range(len(sessions)):
        s1 = sessions[i]
        for j in range(i + 1, len(sessions)):
            s2 = sessions[j]
            if s1.day != s2.day:
                continue
            if not overlaps(s1.time_slot, lengths[i], s2.time_slot, lengths[j]):
                continue
            if s1.trainer_id == s2.trainer_id:
                conflicts.append(Conflict("trainer", (s1, s2)))
            if s1.room_id == s2.room_id:
                conflicts.append(Conflict("room", (s1, s2)))
    return conflicts
