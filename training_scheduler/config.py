"""
Configuración del planificador de formaciones.

Los parámetros del algoritmo genético y los pesos de la función de aptitud se
cargan desde YAML para que las ejecuciones sean reproducibles y configurables.
"""
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml


DAYS = 5                 # lunes..viernes
TIME_SLOTS_PER_DAY = 8   # 09:00-17:00, bloques de una hora

REQUIRED_OPTION_KEYS: List[str] = ["iterations", "size", "crossover", "mutation"]


class MissingOptionsError(ValueError):
    """Faltan claves obligatorias en las opciones del algoritmo."""

    def __init__(self, missing: Iterable[str]):
        self.missing = list(missing)
        super().__init__(f"Faltan opciones obligatorias: {', '.join(self.missing)}")


class SchedulingInvariantError(RuntimeError):
    """Un requisito llegó a la siembra sin combinaciones válidas."""


@dataclass
class SchedulerConfig:
    # Algoritmo genético
    iterations: int = 500
    population_size: int = 150
    crossover_rate: float = 0.5
    mutation_rate: float = 0.7
    skip: int = 10
    verbose: bool = True
    seed: Optional[int] = None
    workers: int = 1

    # Pesos de la aptitud
    session_weight: float = 10.0
    conflict_penalty: float = 1000.0
    coverage_weight: float = 20.0
    utilization_weight: float = 5.0
    clamp_coverage: bool = False

    # Mutación "reday": por defecto no revisa disponibilidad
    constrain_reday: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SchedulerConfig":
        merged = asdict(cls())
        for k, v in data.items():
            if k in merged:
                merged[k] = v
        return cls(**merged)

    def to_options(self) -> Dict[str, Any]:
        """Opciones listas para GeneticScheduler.find_optimal_schedule."""
        return {
            "iterations": self.iterations,
            "size": self.population_size,
            "crossover": self.crossover_rate,
            "mutation": self.mutation_rate,
            "skip": self.skip,
            "verbose": self.verbose,
            "seed": self.seed,
            "workers": self.workers,
        }


def check_required_options(options: Dict[str, Any]) -> None:
    missing = [key for key in REQUIRED_OPTION_KEYS if key not in options]
    if missing:
        raise MissingOptionsError(missing)


def _load_yaml(path: Path) -> Any:
    if not path.exists():
        return {}
    text = path.read_text(encoding="utf-8")
    return yaml.safe_load(text) or {}


def load_config(path: str = "config.yaml") -> SchedulerConfig:
    data = _load_yaml(Path(path))
    if not isinstance(data, dict):
        raise ValueError(f"{path} debe contener un objeto mapeo")
    return SchedulerConfig.from_dict(data)
