"""
Presentación del horario: texto agrupado por día y aula, estadísticas de
uso y tablas pandas para exportar a CSV.
"""
from typing import List, Sequence

import pandas as pd

from .config import TIME_SLOTS_PER_DAY
from .model import Conflict, Room, ScheduledSession, Trainer, TrainingRequirement

DAY_NAMES = ["Lunes", "Martes", "Miércoles", "Jueves", "Viernes"]
FIRST_HOUR = 9


class ScheduleFormatter:
    def __init__(
        self,
        trainers: Sequence[Trainer],
        rooms: Sequence[Room],
        trainings: Sequence[TrainingRequirement],
    ):
        self.trainers = {t.id: t for t in trainers}
        self.rooms = list(rooms)
        self.rooms_by_id = {r.id: r for r in self.rooms}
        self.trainings = {t.id: t for t in trainings}

    def day_name(self, day: int) -> str:
        return DAY_NAMES[day] if 0 <= day < len(DAY_NAMES) else f"Día {day}"

    def time_slot_label(self, start_slot: int, duration: int = 1) -> str:
        return f"{FIRST_HOUR + start_slot:02d}:00-{FIRST_HOUR + start_slot + duration:02d}:00"

    def _sorted(self, sessions: Sequence[ScheduledSession]) -> List[ScheduledSession]:
        return sorted(sessions, key=lambda s: (s.day, s.time_slot))

    def to_dataframe(self, sessions: Sequence[ScheduledSession]) -> pd.DataFrame:
        rows = []
        for s in self._sorted(sessions):
            training = self.trainings[s.training_id]
            trainer = self.trainers.get(s.trainer_id)
            room = self.rooms_by_id.get(s.room_id)
            rows.append(
                {
                    "Sesion": f"{s.session_id[0]}-{s.session_id[1]}",
                    "Formacion": training.title,
                    "Docente": trainer.name if trainer else f"Docente {s.trainer_id}",
                    "Aula": room.name if room else f"Aula {s.room_id}",
                    "Dia": self.day_name(s.day),
                    "Horario": self.time_slot_label(s.time_slot, training.duration),
                }
            )
        return pd.DataFrame(rows, columns=["Sesion", "Formacion", "Docente", "Aula", "Dia", "Horario"])

    def conflicts_dataframe(self, conflicts: Sequence[Conflict]) -> pd.DataFrame:
        rows = []
        for c in conflicts:
            a, b = c.sessions
            rows.append(
                {
                    "tipo": c.type,
                    "formaciones": " / ".join(self.trainings[s.training_id].title for s in (a, b)),
                    "docentes": " / ".join(self._trainer_name(s.trainer_id) for s in (a, b)),
                    "aulas": " / ".join(self._room_name(s.room_id) for s in (a, b)),
                    "franjas": " / ".join(f"{s.day} {s.time_slot}" for s in (a, b)),
                }
            )
        return pd.DataFrame(rows, columns=["tipo", "formaciones", "docentes", "aulas", "franjas"])

    def _trainer_name(self, trainer_id) -> str:
        trainer = self.trainers.get(trainer_id)
        return trainer.name if trainer else str(trainer_id)

    def _room_name(self, room_id) -> str:
        room = self.rooms_by_id.get(room_id)
        return room.name if room else str(room_id)

    def format_schedule(self, sessions: Sequence[ScheduledSession]) -> str:
        out = ["HORARIO DE FORMACIONES", "=" * 22, ""]
        ordered = self._sorted(sessions)

        for day in sorted({s.day for s in ordered}):
            day_sessions = [s for s in ordered if s.day == day]
            name = self.day_name(day)
            out += [name, "-" * len(name), ""]
            for room in self.rooms:
                room_sessions = [s for s in day_sessions if s.room_id == room.id]
                if not room_sessions:
                    continue
                out.append(f"Aula: {room.name} (Capacidad: {room.capacity})")
                for s in room_sessions:
                    training = self.trainings[s.training_id]
                    label = self.time_slot_label(s.time_slot, training.duration)
                    out.append(f"  {label}: {training.title} (Docente: {self._trainer_name(s.trainer_id)})")
                out.append("")
            out.append("")

        out.append(self.statistics(sessions))
        return "\n".join(out)

    def statistics(self, sessions: Sequence[ScheduledSession]) -> str:
        lines = ["ESTADÍSTICAS", "=" * 12, "", "Ocurrencias por formación:"]
        for training in self.trainings.values():
            count = sum(1 for s in sessions if s.training_id == training.id)
            pct = count / training.required_occurrences * 100
            lines.append(f"  {training.title}: {count}/{training.required_occurrences} ({pct:.0f}%)")

        lines += ["", "Uso de docentes:"]
        for trainer in self.trainers.values():
            own = [s for s in sessions if s.trainer_id == trainer.id]
            hours = sum(self.trainings[s.training_id].duration for s in own)
            lines.append(f"  {trainer.name}: {len(own)} sesiones ({hours} horas)")

        lines += ["", "Uso de aulas:"]
        for room in self.rooms:
            own = [s for s in sessions if s.room_id == room.id]
            hours = sum(self.trainings[s.training_id].duration for s in own)
            max_hours = len(room.available_days) * TIME_SLOTS_PER_DAY
            pct = hours / max_hours * 100 if max_hours else 0.0
            lines.append(f"  {room.name}: {len(own)} sesiones ({hours}/{max_hours} horas, {pct:.1f}%)")
        return "\n".join(lines)
