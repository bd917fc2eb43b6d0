from __future__ import annotations

import random
import unittest
from collections import Counter

from guideraffle.raffle import (
    DrawEngine,
    DrawPool,
    InvalidInputError,
    Participant,
    allocate_tickets,
    draw_step,
    draw_winners,
    preview_ticket,
)


def _ticketed(*counts: int, seed: int = 0):
    roster = [
        Participant(id=f"g{i}", name=f"Guide {i}", total_tickets=count)
        for i, count in enumerate(counts, start=1)
    ]
    return allocate_tickets(roster, rng=random.Random(seed))


class DrawPoolTests(unittest.TestCase):
    def test_zero_ticket_participants_are_dropped(self) -> None:
        pool = DrawPool.from_participants(_ticketed(3, 0, 2))
        self.assertEqual([p.id for p in pool.participants], ["g1", "g3"])
        self.assertEqual(pool.candidate_count, 5)
        self.assertEqual(pool.participant_count, 2)

    def test_candidates_flatten_every_ticket(self) -> None:
        ticketed = _ticketed(3, 2)
        entries = DrawPool.from_participants(ticketed).candidates()
        self.assertEqual(sorted(ticket for ticket, _ in entries), [1, 2, 3, 4, 5])
        for ticket, owner in entries:
            self.assertIn(ticket, owner.ticket_numbers)

    def test_evict_returns_new_pool(self) -> None:
        pool = DrawPool.from_participants(_ticketed(3, 2))
        smaller = pool.evict("g1")
        self.assertEqual(pool.participant_count, 2)
        self.assertEqual([p.id for p in smaller.participants], ["g2"])
        self.assertEqual(smaller.candidate_count, 2)

    def test_duplicate_participant_rejected(self) -> None:
        ticketed = _ticketed(1, 1)
        with self.assertRaises(InvalidInputError):
            DrawPool.from_participants([ticketed[0], ticketed[0]])

    def test_non_ticketed_entry_rejected(self) -> None:
        with self.assertRaises(InvalidInputError):
            DrawPool.from_participants([Participant("g1", "A", 1)])  # type: ignore[list-item]

    def test_empty_pool(self) -> None:
        pool = DrawPool.from_participants([])
        self.assertTrue(pool.is_empty)
        self.assertTrue(DrawPool.from_participants(_ticketed(0, 0)).is_empty)


class DrawStepTests(unittest.TestCase):
    def test_step_evicts_all_winner_tickets(self) -> None:
        ticketed = _ticketed(4, 3, 2)
        step = draw_step(ticketed, rng=random.Random(1))
        self.assertIsNotNone(step.result)
        winner = step.result.winner
        self.assertIn(step.result.drawn_ticket, winner.ticket_numbers)
        remaining_ids = {p.id for p in step.pool.participants}
        self.assertNotIn(winner.id, remaining_ids)
        self.assertEqual(step.pool.candidate_count, 9 - winner.total_tickets)
        remaining_tickets = {t for t, _ in step.pool.candidates()}
        self.assertFalse(remaining_tickets & set(winner.ticket_numbers))

    def test_step_on_empty_pool_returns_no_result(self) -> None:
        pool = DrawPool()
        step = draw_step(pool, rng=random.Random(1))
        self.assertIsNone(step.result)
        self.assertIs(step.pool, pool)

    def test_step_does_not_mutate_input_pool(self) -> None:
        pool = DrawPool.from_participants(_ticketed(2, 2))
        draw_step(pool, rng=random.Random(3))
        self.assertEqual(pool.participant_count, 2)
        self.assertEqual(pool.candidate_count, 4)

    def test_threading_steps_matches_draw_all(self) -> None:
        ticketed = _ticketed(5, 1, 7, 3)
        batch = draw_winners(ticketed, 3, rng=random.Random(42))

        rng = random.Random(42)
        pool = DrawPool.from_participants(ticketed)
        stepped = []
        for _ in range(3):
            step = draw_step(pool, rng=rng)
            stepped.append(step.result)
            pool = step.pool
        self.assertEqual(stepped, batch)


class DrawWinnersTests(unittest.TestCase):
    def test_example_two_winners_from_two_guides(self) -> None:
        ticketed = _ticketed(3, 2)
        results = draw_winners(ticketed, 2, rng=random.Random(5))
        self.assertEqual(len(results), 2)
        self.assertEqual({r.winner.id for r in results}, {"g1", "g2"})
        self.assertEqual(len({r.drawn_ticket for r in results}), 2)
        for result in results:
            self.assertIn(result.drawn_ticket, result.winner.ticket_numbers)

    def test_no_double_win_across_seeds(self) -> None:
        ticketed = _ticketed(10, 1, 1, 30, 4, 2, 6)
        for seed in range(50):
            results = draw_winners(ticketed, 5, rng=random.Random(seed))
            ids = [r.winner.id for r in results]
            self.assertEqual(len(ids), len(set(ids)))
            self.assertEqual(len(results), 5)

    def test_winners_and_results_are_hashable(self) -> None:
        roster = [
            Participant("a", "A", 2, metrics={"tours": 4}, attributes={"team": "n"}),
            Participant("b", "B", 1, metrics={"tours": 1}),
        ]
        results = draw_winners(allocate_tickets(roster, rng=random.Random(6)), 2)
        self.assertEqual(len({r.winner for r in results}), 2)
        self.assertEqual(len(set(results)), 2)
        by_winner = {r.winner: r.drawn_ticket for r in results}
        for result in results:
            self.assertEqual(by_winner[result.winner], result.drawn_ticket)

    def test_early_termination_when_pool_runs_out(self) -> None:
        ticketed = _ticketed(2, 0, 5, 1)
        results = draw_winners(ticketed, 10, rng=random.Random(9))
        self.assertEqual(len(results), 3)

    def test_single_participant_pool(self) -> None:
        results = draw_winners(_ticketed(4), 5, rng=random.Random(2))
        self.assertEqual(len(results), 1)
        self.assertEqual(results[0].winner.id, "g1")

    def test_empty_pool_returns_empty_list(self) -> None:
        self.assertEqual(draw_winners([], 3), [])
        self.assertEqual(draw_winners(_ticketed(0), 1), [])

    def test_invalid_count_rejected(self) -> None:
        ticketed = _ticketed(1)
        for bad in (0, -2, 1.0, "2", True):
            with self.subTest(bad=bad):
                with self.assertRaises(InvalidInputError):
                    draw_winners(ticketed, bad)  # type: ignore[arg-type]

    def test_invalid_count_rejected_even_for_empty_pool(self) -> None:
        with self.assertRaises(InvalidInputError):
            draw_winners([], 0)

    def test_win_frequency_follows_ticket_weight(self) -> None:
        ticketed = _ticketed(10, 30, 60)
        pool = DrawPool.from_participants(ticketed)
        rng = random.Random(1234)
        trials = 20000
        wins = Counter(draw_step(pool, rng=rng).result.winner.id for _ in range(trials))
        expected = {"g1": 0.1, "g2": 0.3, "g3": 0.6}
        for guide_id, share in expected.items():
            # four standard deviations of a binomial proportion
            tolerance = 4 * (share * (1 - share) / trials) ** 0.5
            self.assertAlmostEqual(wins[guide_id] / trials, share, delta=tolerance)


class PreviewTicketTests(unittest.TestCase):
    def test_preview_comes_from_pool_and_leaves_it_intact(self) -> None:
        pool = DrawPool.from_participants(_ticketed(3, 2))
        rng = random.Random(8)
        for _ in range(20):
            self.assertIn(preview_ticket(pool, rng=rng), {1, 2, 3, 4, 5})
        self.assertEqual(pool.candidate_count, 5)

    def test_preview_on_empty_pool(self) -> None:
        self.assertIsNone(preview_ticket(DrawPool()))


class DrawEngineTests(unittest.TestCase):
    def test_engine_is_reproducible_with_seeded_rng(self) -> None:
        roster = [
            Participant(id=f"g{i}", name=f"Guide {i}", total_tickets=i)
            for i in range(1, 6)
        ]

        def run(seed: int):
            engine = DrawEngine(random.Random(seed))
            ticketed = engine.allocate(roster)
            pool = engine.start_pool(ticketed)
            return [(r.winner.id, r.drawn_ticket) for r in engine.draw_winners(pool, 3)]

        self.assertEqual(run(17), run(17))

    def test_engine_step_and_preview(self) -> None:
        engine = DrawEngine(random.Random(4))
        pool = engine.start_pool(engine.allocate([Participant("a", "A", 2)]))
        self.assertIn(engine.preview_ticket(pool), {1, 2})
        step = engine.step(pool)
        self.assertEqual(step.result.winner.id, "a")
        self.assertTrue(step.pool.is_empty)


if __name__ == "__main__":
    unittest.main()
