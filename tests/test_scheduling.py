import asyncio
import unittest

from mazegame.scheduling import AsyncioScheduler, ManualScheduler


class ManualSchedulerTests(unittest.TestCase):
    def test_callbacks_fire_in_time_order(self) -> None:
        scheduler = ManualScheduler()
        fired = []
        scheduler.call_later(200, lambda: fired.append(("late", scheduler.now())))
        scheduler.call_later(100, lambda: fired.append(("early", scheduler.now())))
        scheduler.advance(150)
        self.assertEqual(fired, [("early", 100.0)])
        self.assertEqual(scheduler.now(), 150.0)
        scheduler.advance(50)
        self.assertEqual(fired, [("early", 100.0), ("late", 200.0)])

    def test_nested_scheduling_within_one_advance(self) -> None:
        scheduler = ManualScheduler()
        fired = []

        def first():
            fired.append("first")
            scheduler.call_later(10, lambda: fired.append("second"))

        scheduler.call_later(10, first)
        scheduler.advance(20)
        self.assertEqual(fired, ["first", "second"])

    def test_cancelled_handle_never_fires(self) -> None:
        scheduler = ManualScheduler()
        fired = []
        handle = scheduler.call_later(5, lambda: fired.append("x"))
        self.assertEqual(scheduler.pending, 1)
        handle.cancel()
        self.assertEqual(scheduler.pending, 0)
        scheduler.advance(10)
        self.assertEqual(fired, [])

    def test_cancelled_handles_do_not_accumulate(self) -> None:
        scheduler = ManualScheduler()
        for _ in range(50):
            scheduler.call_later(5000, lambda: None).cancel()
        kept = scheduler.call_later(5000, lambda: None)
        self.assertEqual(len(scheduler._queue), 1)
        self.assertIs(scheduler._queue[0][2], kept)


class AsyncioSchedulerTests(unittest.TestCase):
    def test_fires_and_cancels_on_event_loop(self) -> None:
        async def scenario():
            scheduler = AsyncioScheduler()
            fired = []
            scheduler.call_later(1, lambda: fired.append("kept"))
            scheduler.call_later(1, lambda: fired.append("dropped")).cancel()
            await asyncio.sleep(0.05)
            return fired

        self.assertEqual(asyncio.run(scenario()), ["kept"])


if __name__ == "__main__":
    unittest.main()
