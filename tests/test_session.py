import random
import tempfile
import unittest
from pathlib import Path

import numpy as np

from mazegame.grid import Direction, is_exit_reachable
from mazegame.scheduling import ManualScheduler
from mazegame.session import GameSession, SessionMode
from mazegame.storage import JsonFileGameStore, MemoryGameStore
from mazegame.walls import DynamicWallMutator

SEED_0_SOLUTION = ["down", "right", "down", "left", "down", "right", "down"]


class GameSessionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.scheduler = ManualScheduler()
        self.store = MemoryGameStore()
        self.session = GameSession(self.scheduler, self.store, seed=0)

    def _play_solution(self, session: GameSession) -> None:
        for move in SEED_0_SOLUTION:
            session.move(move)
            self.scheduler.advance(120)

    def test_new_session_starts_live_at_entrance(self) -> None:
        self.assertEqual(self.session.seed, 0)
        self.assertIs(self.session.mode, SessionMode.LIVE)
        self.assertEqual(self.session.player_position, (0, 1))
        self.assertFalse(self.session.dynamic_walls_enabled)

    def test_win_saves_game_once(self) -> None:
        self._play_solution(self.session)
        self.assertTrue(self.session.has_won)
        self.assertIs(self.session.mode, SessionMode.WON)
        record = self.store.load_by_seed(0)
        self.assertIsNotNone(record)
        self.assertEqual(record.moves, SEED_0_SOLUTION)
        self.assertEqual((record.rows, record.cols, record.cell_size), (15, 15, 25))
        self.assertTrue(record.won)
        self.assertFalse(self.session.grid.flags.writeable)
        with self.assertRaises(RuntimeError):
            self.session.replace_grid(self.session.grid.copy())

    def test_load_seed_replays_saved_game(self) -> None:
        self._play_solution(self.session)
        viewer = GameSession(ManualScheduler(), self.store, seed=3)
        viewer.load_seed("0")
        self.assertIs(viewer.mode, SessionMode.REPLAY)
        self.assertTrue(viewer.has_won)
        self.assertEqual(viewer.trail, self.session.trail)
        self.assertEqual(viewer.player_position, (14, 13))
        self.assertFalse(viewer.move("up"))
        self.assertFalse(viewer.toggle_dynamic_walls())
        self.assertFalse(viewer.grid.flags.writeable)

    def test_entering_replay_cancels_wall_shift_timer(self) -> None:
        self._play_solution(self.session)
        scheduler = ManualScheduler()
        viewer = GameSession(scheduler, self.store, seed=3)
        self.assertTrue(viewer.set_dynamic_walls(True))
        self.assertEqual(scheduler.pending, 1)
        viewer.load_seed("0")
        self.assertEqual(scheduler.pending, 0)
        self.assertIsNone(viewer.next_shift_time)
        self.assertFalse(viewer.dynamic_walls_enabled)
        version = viewer.grid_version
        scheduler.advance(10000)
        self.assertEqual(viewer.grid_version, version)

    def test_seed_text_must_be_decimal_digits(self) -> None:
        for text in ("1_000", "0x10", "1e3", "+", "-", ""):
            with self.subTest(text=text):
                with self.assertRaises(ValueError):
                    self.session.load_seed(text)
        self.assertEqual(self.session.seed, 0)
        self.session.load_seed("-7")
        self.assertEqual(self.session.seed, -7)

    def test_games_won_under_shifting_walls_replay_exactly(self) -> None:
        replayed_with_shifts = 0
        for trial in range(12):
            scheduler = ManualScheduler()
            store = MemoryGameStore()
            session = GameSession(
                scheduler,
                store,
                seed=0,
                mutator=DynamicWallMutator(random.Random(trial)),
                interval_rng=random.Random(trial),
            )
            session.set_dynamic_walls(True)
            rng = random.Random(100 + trial)
            for _ in range(3000):
                session.move(rng.choice(list(Direction)))
                scheduler.advance(rng.choice((120, 120, 700)))
                if session.has_won:
                    break
            if not session.has_won:
                continue

            record = store.load_by_seed(0)
            viewer = GameSession(ManualScheduler(), store, seed=3)
            viewer.load_seed("0")
            self.assertTrue(viewer.has_won)
            self.assertEqual(viewer.trail, session.trail)
            self.assertEqual(viewer.player_position, session.player_position)
            np.testing.assert_array_equal(viewer.grid, session.grid)
            if record.wall_shifts:
                replayed_with_shifts += 1
        self.assertGreater(replayed_with_shifts, 0)

    def test_replace_grid_records_changed_cells(self) -> None:
        self.session.move("down")
        self.scheduler.advance(120)
        grid = self.session.grid.copy()
        grid[5, 5] = 1 - grid[5, 5]
        self.session.replace_grid(grid)
        self.assertEqual(len(self.session.wall_shifts), 1)
        move, changes = self.session.wall_shifts[0]
        self.assertEqual(move, 1)
        self.assertEqual([(change.row, change.col) for change in changes], [(5, 5)])
        self.session.replace_grid(grid.copy())
        self.assertEqual(len(self.session.wall_shifts), 1)

    def test_load_seed_without_record_starts_live(self) -> None:
        self.session.load_seed(" 5 ")
        self.assertEqual(self.session.seed, 5)
        self.assertIs(self.session.mode, SessionMode.LIVE)
        self.assertEqual(self.session.grid.shape, (21, 25))

    def test_non_numeric_seed_leaves_session_untouched(self) -> None:
        self.session.move("down")
        with self.assertRaises(ValueError):
            self.session.load_seed("abc")
        self.assertEqual(self.session.seed, 0)
        self.assertEqual(self.session.player_position, (1, 1))

    def test_trail_with_player_shows_in_flight_position(self) -> None:
        self.session.move("down")
        self.assertEqual(self.session.trail_with_player(), [(0, 1), (1, 1)])
        self.assertEqual(self.session.trail, [(0, 1)])

    def test_dynamic_walls_stop_on_win(self) -> None:
        self.assertTrue(self.session.toggle_dynamic_walls())
        self.assertIsNotNone(self.session.next_shift_time)
        self._play_solution(self.session)
        self.assertFalse(self.session.dynamic_walls_enabled)
        self.assertIsNone(self.session.next_shift_time)
        self.assertFalse(self.session.set_dynamic_walls(True))

    def test_new_maze_turns_dynamic_walls_off(self) -> None:
        self.session.set_dynamic_walls(True)
        self.session.new_maze(12)
        self.assertFalse(self.session.dynamic_walls_enabled)
        self.assertEqual(self.scheduler.pending, 0)
        self.assertEqual(self.session.seed, 12)

    def test_live_shifts_never_strand_the_player(self) -> None:
        session = GameSession(
            self.scheduler,
            self.store,
            seed=12345,
            mutator=DynamicWallMutator(random.Random(4)),
            interval_rng=random.Random(4),
        )
        original = session.grid.copy()
        session.set_dynamic_walls(True)
        session.move("down")
        for _ in range(25):
            self.scheduler.advance(6000)
            self.assertTrue(is_exit_reachable(session.grid, session.player_position))
        self.assertGreater(session.grid_version, 1)
        self.assertFalse(np.array_equal(session.grid, original))


class SessionStoreIntegrationTests(unittest.TestCase):
    def test_json_store_round_trip_through_sessions(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            store = JsonFileGameStore(Path(tmp) / "games.json")
            scheduler = ManualScheduler()
            session = GameSession(scheduler, store, seed=0)
            for move in SEED_0_SOLUTION:
                session.move(move)
                scheduler.advance(120)

            reloaded = GameSession(ManualScheduler(), JsonFileGameStore(Path(tmp) / "games.json"))
            reloaded.load_seed("0")
            self.assertIs(reloaded.mode, SessionMode.REPLAY)
            self.assertTrue(reloaded.has_won)


if __name__ == "__main__":
    unittest.main()
