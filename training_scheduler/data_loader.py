# training_scheduler/data_loader.py
from dataclasses import dataclass
from typing import List, Tuple

import pandas as pd

from .model import Room, Trainer, TrainingRequirement


@dataclass(frozen=True)
class DataBundle:
    trainers: List[Trainer]
    rooms: List[Room]
    trainings: List[TrainingRequirement]


def _int_list(value) -> Tuple[int, ...]:
    # Columnas de lista separadas por ";" (ej. "0;1;2")
    if pd.isna(value):
        return ()
    text = str(value).strip()
    if not text:
        return ()
    return tuple(int(float(v)) for v in text.split(";") if v.strip())


def load_data(data_dir: str) -> DataBundle:
    trainers_df = pd.read_csv(f"{data_dir}/trainers.csv")
    rooms_df = pd.read_csv(f"{data_dir}/rooms.csv")
    trainings_df = pd.read_csv(f"{data_dir}/trainings.csv")

    trainers = [
        Trainer(int(r.id), str(r.name), _int_list(r.available_days))
        for r in trainers_df.itertuples(index=False)
    ]
    rooms = [
        Room(int(r.id), str(r.name), int(r.capacity), _int_list(r.available_days))
        for r in rooms_df.itertuples(index=False)
    ]

    if "duration" not in trainings_df.columns:
        trainings_df["duration"] = 1
    trainings_df["duration"] = trainings_df["duration"].fillna(1).astype(int)

    trainings = [
        TrainingRequirement(
            id=int(r.id),
            title=str(r.title),
            required_occurrences=int(r.required_occurrences),
            possible_trainers=_int_list(r.possible_trainers),
            possible_rooms=_int_list(r.possible_rooms),
            duration=int(r.duration),
        )
        for r in trainings_df.itertuples(index=False)
    ]
    return DataBundle(trainers=trainers, rooms=rooms, trainings=trainings)
