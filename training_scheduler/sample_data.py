# training_scheduler/sample_data.py
from typing import List

from .data_loader import DataBundle
from .model import Room, Trainer, TrainingRequirement

TRAINERS: List[Trainer] = [
    Trainer(1, "Alice", (0, 1, 2, 3, 4)),   # toda la semana
    Trainer(2, "Bob", (0, 1, 2)),           # lunes a miércoles
    Trainer(3, "Charlie", (2, 3, 4)),       # miércoles a viernes
    Trainer(4, "Diana", (1, 3, 4)),
    Trainer(5, "Evan", (0, 2, 4)),
]

ROOMS: List[Room] = [
    Room(1, "Room A", 20, (0, 1, 2, 3, 4)),
    Room(2, "Room B", 15, (0, 1, 2, 3)),
    Room(3, "Room C", 30, (1, 2, 3, 4)),
    Room(4, "Room D", 25, (0, 2, 4)),
]

TRAININGS: List[TrainingRequirement] = [
    TrainingRequirement(1, "Introduction to JavaScript", 10, (1, 2), (1, 2, 3), 2),
    TrainingRequirement(2, "Advanced CSS", 8, (1, 3), (1, 3), 1),
    TrainingRequirement(3, "Python Basics", 8, (2, 4), (2, 4), 2),
    TrainingRequirement(4, "Data Science", 7, (3, 5), (3,), 3),
    TrainingRequirement(5, "Web Security", 8, (1, 5), (1, 2, 4), 1),
    TrainingRequirement(6, "UX Design", 6, (4,), (1, 2, 3, 4), 2),
    TrainingRequirement(7, "DevOps", 10, (2, 3), (2, 3), 2),
]


def load_sample_data() -> DataBundle:
    return DataBundle(trainers=list(TRAINERS), rooms=list(ROOMS), trainings=list(TRAININGS))
