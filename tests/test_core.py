import random
import unittest

from training_scheduler.config import SchedulerConfig, SchedulingInvariantError, TIME_SLOTS_PER_DAY
from training_scheduler.conflicts import detect_conflicts
from training_scheduler.domains import (
    INSUFFICIENT_COMBINATIONS,
    NO_COMBINATIONS,
    FeasibilityReport,
    SchedulingContext,
    filter_feasible,
)
from training_scheduler.evaluation import evaluate, fitness
from training_scheduler.initial_population import build_initial_population, build_random_individual
from training_scheduler.model import Individual, Room, ScheduledSession, Trainer, TrainingRequirement
from training_scheduler.operators import mutate, session_crossover, tournament_selection

ALL_DAYS = (0, 1, 2, 3, 4)


def make_context(trainers, rooms, requirements, cfg=None):
    report = filter_feasible(requirements, trainers, rooms)
    return SchedulingContext.build(trainers, rooms, report, cfg)


def session(training_id, day, slot, trainer, room, occurrence=0):
    return ScheduledSession(training_id, trainer, room, day, slot, (training_id, occurrence))


class AlwaysReday(random.Random):
    # siempre elige la mutación de día; el resto del azar es normal
    def random(self):
        return 0.95

    def getrandbits(self, k):
        return super().getrandbits(k)


class ConflictTests(unittest.TestCase):
    def setUp(self):
        self.trainings = [
            TrainingRequirement(1, "A", 1, (1,), (1,), 2),
            TrainingRequirement(2, "B", 1, (1,), (1,), 3),
            TrainingRequirement(3, "C", 1, (1,), (1,), 1),
        ]

    def test_no_conflicts(self):
        schedule = [
            session(1, 1, 9, 1, 1),
            session(2, 2, 9, 1, 1),
            session(3, 1, 13, 1, 1),
        ]
        self.assertEqual(detect_conflicts(schedule, self.trainings), [])

    def test_trainer_conflict(self):
        s1 = session(1, 1, 9, 1, 1)
        s2 = session(2, 1, 10, 1, 2)
        conflicts = detect_conflicts([s1, s2], self.trainings)
        self.assertEqual(len(conflicts), 1)
        self.assertEqual(conflicts[0].type, "trainer")
        self.assertEqual(conflicts[0].sessions, (s1, s2))

    def test_room_conflict(self):
        conflicts = detect_conflicts([session(1, 1, 9, 1, 1), session(2, 1, 10, 2, 1)], self.trainings)
        self.assertEqual([c.type for c in conflicts], ["room"])

    def test_trainer_and_room_conflict(self):
        conflicts = detect_conflicts([session(1, 1, 9, 1, 1), session(2, 1, 10, 1, 1)], self.trainings)
        self.assertEqual([c.type for c in conflicts], ["trainer", "room"])

    def test_different_days(self):
        conflicts = detect_conflicts([session(1, 1, 9, 1, 1), session(2, 2, 9, 1, 1)], self.trainings)
        self.assertEqual(conflicts, [])

    def test_adjacent_intervals_do_not_overlap(self):
        # 9-11 y 11-12
        conflicts = detect_conflicts([session(1, 1, 9, 1, 1), session(3, 1, 11, 1, 1)], self.trainings)
        self.assertEqual(conflicts, [])

    def test_discovery_order(self):
        schedule = [
            session(1, 0, 0, 1, 1),
            session(1, 0, 1, 2, 1, occurrence=1),
            session(3, 0, 1, 1, 2),
        ]
        conflicts = detect_conflicts(schedule, self.trainings)
        pairs = [(c.type, c.sessions[0].session_id, c.sessions[1].session_id) for c in conflicts]
        self.assertEqual(pairs, [
            ("room", (1, 0), (1, 1)),
            ("trainer", (1, 0), (3, 0)),
        ])

    def test_empty_and_single(self):
        self.assertEqual(detect_conflicts([], self.trainings), [])
        self.assertEqual(detect_conflicts([session(1, 1, 9, 1, 1)], self.trainings), [])

    def test_unknown_training_raises(self):
        with self.assertRaises(ValueError):
            detect_conflicts([session(99, 0, 0, 1, 1)], self.trainings)


class FeasibilityTests(unittest.TestCase):
    def test_excludes_requirement_without_shared_days(self):
        trainers = [Trainer(1, "T1", (0, 1))]
        rooms = [Room(1, "R1", 10, (2, 3))]
        reqs = [TrainingRequirement(1, "Imposible", 1, (1,), (1,), 1)]
        report = filter_feasible(reqs, trainers, rooms)
        self.assertEqual(report.feasible, [])
        self.assertEqual(len(report.diagnostics), 1)
        diag = report.diagnostics[0]
        self.assertEqual(diag.reason, NO_COMBINATIONS)
        self.assertEqual(diag.trainer_availability, {"T1": [0, 1]})
        self.assertIn("Imposible", diag.describe())

    def test_insufficient_combinations(self):
        trainers = [Trainer(1, "T1", (0,))]
        rooms = [Room(1, "R1", 10, (0,))]
        # duración 8 -> un solo slot de inicio en un único día
        reqs = [TrainingRequirement(1, "Larga", 2, (1,), (1,), 8)]
        report = filter_feasible(reqs, trainers, rooms)
        self.assertEqual(report.feasible, [])
        self.assertEqual(report.diagnostics[0].reason, INSUFFICIENT_COMBINATIONS)
        self.assertEqual(report.diagnostics[0].combination_count, 1)

    def test_duration_longer_than_day(self):
        trainers = [Trainer(1, "T1", ALL_DAYS)]
        rooms = [Room(1, "R1", 10, ALL_DAYS)]
        reqs = [TrainingRequirement(1, "Eterna", 1, (1,), (1,), TIME_SLOTS_PER_DAY + 1)]
        self.assertEqual(filter_feasible(reqs, trainers, rooms).feasible, [])

    def test_combination_count(self):
        trainers = [Trainer(1, "T1", (0, 1, 2)), Trainer(2, "T2", (1,))]
        rooms = [Room(1, "R1", 10, (1, 2))]
        req = TrainingRequirement(1, "Ok", 3, (1, 2), (1,), 3)
        report = filter_feasible([req], trainers, rooms)
        self.assertEqual(report.feasible, [req])
        # (T1: días 1,2) + (T2: día 1) = 3 días x 6 slots
        self.assertEqual(len(report.combinations[1]), 18)
        for c in report.combinations[1]:
            self.assertLessEqual(c.time_slot + req.duration, TIME_SLOTS_PER_DAY)

    def test_unknown_ids_contribute_nothing(self):
        trainers = [Trainer(1, "T1", ALL_DAYS)]
        rooms = [Room(1, "R1", 10, ALL_DAYS)]
        reqs = [TrainingRequirement(1, "Fantasma", 1, (7,), (1,), 1)]
        report = filter_feasible(reqs, trainers, rooms)
        self.assertEqual(report.feasible, [])


class SeedingTests(unittest.TestCase):
    def setUp(self):
        self.trainers = [Trainer(1, "T1", (0, 2)), Trainer(2, "T2", ALL_DAYS)]
        self.rooms = [Room(1, "R1", 10, (0, 1, 2)), Room(2, "R2", 10, (2, 4))]
        self.reqs = [
            TrainingRequirement(1, "A", 3, (1, 2), (1, 2), 2),
            TrainingRequirement(2, "B", 2, (2,), (2,), 1),
        ]
        self.ctx = make_context(self.trainers, self.rooms, self.reqs)

    def test_individual_respects_invariants(self):
        rng = random.Random(3)
        for ind in build_initial_population(self.ctx, 20, rng):
            self.assertEqual(len(ind), 5)
            ids = [s.session_id for s in ind]
            self.assertEqual(ids, [(1, 0), (1, 1), (1, 2), (2, 0), (2, 1)])
            for s in ind:
                req = self.ctx.requirements_by_id[s.training_id]
                self.assertIn(s.trainer_id, req.possible_trainers)
                self.assertIn(s.room_id, req.possible_rooms)
                self.assertLessEqual(s.time_slot + req.duration, TIME_SLOTS_PER_DAY)
                self.assertIn(s.day, self.ctx.trainers_by_id[s.trainer_id].available_days)
                self.assertIn(s.day, self.ctx.rooms_by_id[s.room_id].available_days)

    def test_missing_combinations_is_invariant_error(self):
        report = FeasibilityReport(feasible=list(self.reqs), combinations={})
        ctx = SchedulingContext.build(self.trainers, self.rooms, report)
        with self.assertRaises(SchedulingInvariantError):
            build_random_individual(ctx, random.Random(0))


class EvaluationTests(unittest.TestCase):
    def setUp(self):
        self.trainers = [Trainer(1, "T1", ALL_DAYS), Trainer(2, "T2", ALL_DAYS)]
        self.rooms = [Room(1, "R1", 10, ALL_DAYS), Room(2, "R2", 10, ALL_DAYS)]
        self.reqs = [TrainingRequirement(1, "A", 2, (1, 2), (1, 2), 1)]

    def test_penalty_conflicts(self):
        ctx = make_context(self.trainers, self.rooms, self.reqs)
        ind = Individual([session(1, 0, 0, 1, 1, 0), session(1, 0, 0, 1, 1, 1)])
        res = evaluate(ind, ctx)
        self.assertEqual(len(res.conflicts), 2)
        # 20 - 2000 + 1*20 + 0.5*5
        self.assertAlmostEqual(res.fitness, -1957.5)
        self.assertAlmostEqual(ind.fitness, -1957.5)

    def test_conflict_free_fitness(self):
        ctx = make_context(self.trainers, self.rooms, self.reqs)
        ind = Individual([session(1, 0, 0, 1, 1, 0), session(1, 0, 0, 2, 2, 1)])
        self.assertAlmostEqual(fitness(ind, ctx), 45.0)

    def test_coverage_unclamped_by_default(self):
        sessions = [session(1, d, 0, 1, 1, d) for d in range(3)]
        ctx = make_context(self.trainers, self.rooms, self.reqs)
        res = evaluate(Individual(list(sessions)), ctx)
        self.assertAlmostEqual(res.coverage, 1.5)

        clamped = make_context(self.trainers, self.rooms, self.reqs, SchedulerConfig(clamp_coverage=True))
        self.assertAlmostEqual(evaluate(Individual(list(sessions)), clamped).coverage, 1.0)

    def test_malformed_input_gets_minimum(self):
        ctx = make_context(self.trainers, self.rooms, self.reqs)
        self.assertEqual(fitness("no es un horario", ctx), 0.0)
        self.assertEqual(fitness([1, 2, 3], ctx), 0.0)
        self.assertEqual(fitness(None, ctx), 0.0)
        self.assertEqual(fitness([session(42, 0, 0, 1, 1)], ctx), 0.0)
        self.assertEqual(fitness([ScheduledSession([1], 1, 1, 0, 0, (1, 0))], ctx), 0.0)
        overlapping = [session(1, 0, None, 1, 1, 0), session(1, 0, 2, 1, 1, 1)]
        self.assertEqual(fitness(overlapping, ctx), 0.0)
        self.assertEqual(fitness(Individual(list(overlapping)), ctx), 0.0)

    def test_plain_sequence_accepted(self):
        ctx = make_context(self.trainers, self.rooms, self.reqs)
        sessions = (session(1, 0, 0, 1, 1, 0), session(1, 1, 0, 2, 2, 1))
        self.assertAlmostEqual(fitness(sessions, ctx), 45.0)


class OperatorTests(unittest.TestCase):
    def setUp(self):
        trainers = [Trainer(1, "T1", ALL_DAYS), Trainer(2, "T2", (0, 1))]
        rooms = [Room(1, "R1", 10, ALL_DAYS), Room(2, "R2", 10, (3, 4))]
        reqs = [
            TrainingRequirement(1, "A", 3, (1, 2), (1, 2), 3),
            TrainingRequirement(2, "B", 2, (1,), (1, 2), 1),
        ]
        self.ctx = make_context(trainers, rooms, reqs)
        self.rng = random.Random(11)

    def test_crossover_identical_parents(self):
        a = build_random_individual(self.ctx, self.rng)
        c1, c2 = session_crossover(a, a, self.rng)
        self.assertEqual(c1.sessions, a.sessions)
        self.assertEqual(c2.sessions, a.sessions)
        for child in (c1, c2):
            for original, copied in zip(a.sessions, child.sessions):
                self.assertIsNot(original, copied)

    def test_crossover_ids_subset_of_parents(self):
        for _ in range(20):
            a = build_random_individual(self.ctx, self.rng)
            b = build_random_individual(self.ctx, self.rng)
            union = {s.session_id for s in a} | {s.session_id for s in b}
            for child in session_crossover(a, b, self.rng):
                self.assertLessEqual({s.session_id for s in child}, union)
                self.assertEqual(len(child), len(a))

    def test_crossover_children_split_parent_versions(self):
        a = build_random_individual(self.ctx, self.rng)
        b = build_random_individual(self.ctx, self.rng)
        c1, c2 = session_crossover(a, b, self.rng)
        for m, f, x, y in zip(a.sessions, b.sessions, c1.sessions, c2.sessions):
            self.assertIn((x, y), [(m, f), (f, m)])

    def test_crossover_drops_unmatched_ids(self):
        mother = Individual([session(1, 0, 0, 1, 1, 0), session(1, 0, 3, 1, 1, 1)])
        father = Individual([session(1, 2, 0, 1, 1, 0), session(2, 0, 0, 1, 1, 0)])
        c1, c2 = session_crossover(mother, father, self.rng)
        self.assertEqual([s.session_id for s in c1], [(1, 0)])
        self.assertEqual([s.session_id for s in c2], [(1, 0)])

    def test_mutation_keeps_size_and_slot_bounds(self):
        ind = build_random_individual(self.ctx, self.rng)
        size = len(ind)
        for _ in range(300):
            ind = mutate(ind, self.ctx, self.rng)
            self.assertEqual(len(ind), size)
            for s in ind:
                req = self.ctx.requirements_by_id[s.training_id]
                self.assertLessEqual(s.time_slot + req.duration, TIME_SLOTS_PER_DAY)
                self.assertIn(s.trainer_id, req.possible_trainers)
                self.assertIn(s.room_id, req.possible_rooms)
                self.assertTrue(0 <= s.day < 5)

    def test_mutation_changes_at_most_one_session(self):
        ind = build_random_individual(self.ctx, self.rng)
        before = list(ind.sessions)
        mutated = mutate(ind, self.ctx, self.rng)
        self.assertEqual(ind.sessions, before)
        diffs = sum(1 for x, y in zip(before, mutated.sessions) if x != y)
        self.assertLessEqual(diffs, 1)
        self.assertEqual([s.session_id for s in mutated], [s.session_id for s in before])

    def test_mutation_empty_individual(self):
        self.assertEqual(len(mutate(Individual(), self.ctx, self.rng)), 0)

    def test_constrained_reday_respects_availability(self):
        cfg = SchedulerConfig(constrain_reday=True)
        ctx = SchedulingContext(
            trainers=self.ctx.trainers,
            rooms=self.ctx.rooms,
            requirements=self.ctx.requirements,
            combinations=self.ctx.combinations,
            cfg=cfg,
            trainers_by_id=self.ctx.trainers_by_id,
            rooms_by_id=self.ctx.rooms_by_id,
            requirements_by_id=self.ctx.requirements_by_id,
        )

        rng = AlwaysReday(5)
        ind = Individual([session(2, 0, 0, 1, 2, 0)])
        for _ in range(50):
            ind = mutate(ind, ctx, rng)
            self.assertIn(ind[0].day, (3, 4))

    def test_default_reday_ignores_availability(self):
        trainers = [Trainer(1, "T1", (0,))]
        rooms = [Room(1, "R1", 10, (0,))]
        reqs = [TrainingRequirement(1, "Solo lunes", 1, (1,), (1,), 1)]
        ctx = make_context(trainers, rooms, reqs)
        self.assertFalse(ctx.cfg.constrain_reday)

        rng = AlwaysReday(8)
        ind = Individual([session(1, 0, 0, 1, 1, 0)])
        days = set()
        for _ in range(50):
            ind = mutate(ind, ctx, rng)
            self.assertTrue(0 <= ind[0].day < 5)
            days.add(ind[0].day)
        self.assertTrue(days - {0})

    def test_tournament_prefers_fitter(self):
        weak = Individual(fitness=-10.0)
        strong = Individual(fitness=10.0)
        picks = [tournament_selection([weak, strong], self.rng) for _ in range(50)]
        self.assertIn(strong, picks)
        self.assertGreater(picks.count(strong), picks.count(weak))


if __name__ == "__main__":
    unittest.main()
