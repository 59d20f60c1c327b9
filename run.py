import argparse
import logging
import time
from pathlib import Path

import pandas as pd

from training_scheduler.config import SchedulerConfig, load_config
from training_scheduler.conflicts import detect_conflicts
from training_scheduler.data_loader import DataBundle, load_data
from training_scheduler.formatter import ScheduleFormatter
from training_scheduler.ga import GeneticScheduler
from training_scheduler.parameter_optimizer import optimize_parameters
from training_scheduler.sample_data import load_sample_data


def export_outputs(formatter: ScheduleFormatter, best, conflicts, solver: GeneticScheduler, metrics, out_dir: Path):
    out_dir.mkdir(parents=True, exist_ok=True)
    formatter.to_dataframe(best.sessions).to_csv(out_dir / "schedule.csv", index=False)
    formatter.conflicts_dataframe(conflicts).to_csv(out_dir / "conflicts.csv", index=False)
    if solver.history:
        pd.DataFrame(solver.history).to_csv(out_dir / "history.csv", index=False)
    pd.DataFrame([metrics]).to_csv(out_dir / "metrics.csv", index=False)


def run_schedule(bundle: DataBundle, cfg: SchedulerConfig, out_dir: Path):
    total_required = sum(t.required_occurrences for t in bundle.trainings)
    print(f"Docentes: {len(bundle.trainers)}")
    print(f"Aulas: {len(bundle.rooms)}")
    print(f"Formaciones: {len(bundle.trainings)}")
    print(f"Ocurrencias requeridas: {total_required}\n")

    solver = GeneticScheduler(bundle.trainers, bundle.rooms, bundle.trainings, cfg)

    print(f"Iteraciones: {cfg.iterations} | Población: {cfg.population_size}")
    start = time.perf_counter()
    res = solver.find_optimal_schedule(cfg.to_options())
    elapsed = time.perf_counter() - start

    best = res.result
    formatter = ScheduleFormatter(bundle.trainers, bundle.rooms, bundle.trainings)
    print("\n" + formatter.format_schedule(best.sessions))

    conflicts = detect_conflicts(best, solver.trainings)
    print(f"\nChoques totales: {len(conflicts)}")
    if conflicts:
        print("\nATENCIÓN: el horario contiene choques:")
        print(formatter.conflicts_dataframe(conflicts).to_string(index=False))
    else:
        print("\nNo se detectaron choques en el horario.")

    metrics = {
        "fitness": best.fitness,
        "conflicts": len(conflicts),
        "sessions": len(best),
        "excluded_trainings": len(solver.diagnostics),
        "time_sec": elapsed,
        "generations": res.generations,
    }
    export_outputs(formatter, best, conflicts, solver, metrics, out_dir)
    print(f"Se guardaron resultados en {out_dir}/")


def run_optimizer(bundle: DataBundle, cfg: SchedulerConfig, out_dir: Path):
    report = optimize_parameters(bundle, base_seed=cfg.seed)
    print("\nResultados fase 1:")
    print(report.phase1.to_string(index=False))
    print("\nResultados fase 2 (fiabilidad):")
    print(report.phase2.to_string(index=False))

    if report.recommended:
        print("\nParámetros recomendados:")
        for k, v in report.recommended.items():
            print(f"  {k}: {v}")
    else:
        print("\nNinguna combinación resultó fiable en las pruebas repetidas.")

    out_dir.mkdir(parents=True, exist_ok=True)
    report.phase1.to_csv(out_dir / "phase1.csv", index=False)
    report.phase2.to_csv(out_dir / "phase2.csv", index=False)


def main():
    parser = argparse.ArgumentParser(description="Planificación de formaciones con algoritmo genético")
    parser.add_argument("--config", default="config.yaml", help="Ruta al archivo de configuración")
    parser.add_argument("--data_dir", default=None, help="Directorio con los CSV de entrada (por defecto, datos de ejemplo)")
    parser.add_argument("--seed", type=int, default=None, help="Semilla del generador aleatorio")
    parser.add_argument("--out_dir", default="outputs", help="Directorio de resultados")
    parser.add_argument("--optimize", action="store_true", help="Ejecuta la búsqueda de parámetros")
    parser.add_argument("--quiet", action="store_true", help="Sin trazas de progreso")
    args = parser.parse_args()

    logging.basicConfig(level=logging.WARNING if args.quiet else logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    cfg = load_config(args.config)
    if args.seed is not None:
        cfg.seed = args.seed
    if args.quiet:
        cfg.verbose = False

    print("Cargando datos...")
    bundle = load_data(args.data_dir) if args.data_dir else load_sample_data()

    out_dir = Path(args.out_dir)
    if args.optimize:
        run_optimizer(bundle, cfg, out_dir)
    else:
        run_schedule(bundle, cfg, out_dir)


if __name__ == "__main__":
    main()
