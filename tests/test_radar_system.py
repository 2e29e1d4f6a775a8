import asyncio
import unittest

from entity_registry import Entity
from radar_config import RadarConfig
from radar_system import RadarSystem
from tests.fakes import RecordingSend, make_entity


def _raise_position():
    raise RuntimeError("position unavailable")


class TestRadarSystem(unittest.TestCase):
    def setUp(self):
        self.send = RecordingSend()
        self.radar = RadarSystem(RadarConfig(update_interval_ms=10), send=self.send)
        self.positions = {"a": (0.0, 0.0, 0.0), "b": (3.0, 0.0, 4.0), "c": (0.0, 0.0, 12.0)}
        self.entities = {k: make_entity(k, self.positions) for k in self.positions}

    def tick(self):
        return self.radar.scheduler.run_once()

    def test_two_players_two_ticks(self):
        self.radar.registry.add(self.entities["a"])
        self.radar.registry.add(self.entities["b"])

        t1 = self.tick()
        self.assertEqual(self.send.last("a"), ("a", [f"radar_b_{t1}"], ["B (5m)"], []))
        self.assertEqual(self.send.last("b"), ("b", [f"radar_a_{t1}"], ["A (5m)"], []))

        t2 = self.tick()
        self.assertGreater(t2, t1)
        self.assertEqual(self.send.last("a"), ("a", [f"radar_b_{t2}"], ["B (5m)"], [f"radar_b_{t1}"]))

    def test_remove_list_matches_previous_add_list(self):
        for e in self.entities.values():
            self.radar.registry.add(e)
        previous = {}
        for _ in range(3):
            self.tick()
            for viewer in ("a", "b", "c"):
                _, added, _, removed = self.send.last(viewer)
                self.assertEqual(len(added), 2)
                self.assertEqual(sorted(removed), sorted(previous.get(viewer, [])))
                previous[viewer] = added

    def test_connect_sends_existing_peers_immediately(self):
        self.radar.on_connect(self.entities["a"])
        self.radar.on_connect(self.entities["b"])
        self.send.clear()

        update = self.radar.on_connect(self.entities["c"])

        self.assertEqual(len(update.added), self.radar.active_count() - 1)
        self.assertEqual(update.removed, [])
        _, added, labels, removed = self.send.last("c")
        self.assertEqual(sorted(labels), ["A (12m)", "B (8m)"])
        self.assertEqual(removed, [])
        # nobody else was touched out of band
        self.assertEqual([c[0] for c in self.send.calls], ["c"])

        self.tick()
        for viewer in ("a", "b"):
            self.assertTrue(any(mid.startswith("radar_c_") for mid in self.send.last(viewer)[1]))

    def test_first_connect_sends_nothing(self):
        update = self.radar.on_connect(self.entities["a"])
        self.assertEqual(update.added, [])
        self.assertEqual(self.send.calls, [("a", [], [], [])])

    def test_connect_with_failing_transport_is_logged(self):
        self.send.failing.add("a")
        with self.assertLogs("radar.system", level="ERROR"):
            self.assertIsNone(self.radar.on_connect(self.entities["a"]))
        self.assertEqual(self.radar.active_count(), 1)

    def test_disconnect_retires_markers_before_next_tick(self):
        self.radar.on_connect(self.entities["a"])
        self.radar.on_connect(self.entities["b"])
        self.tick()
        old_b_marker = self.send.last("a")[1][0]
        self.send.clear()

        self.assertTrue(self.radar.on_disconnect(self.entities["b"]))

        self.assertEqual(self.send.calls, [("a", [], [], [old_b_marker])])
        self.assertEqual(self.radar.engine.previous_marker_ids("a"), frozenset())
        self.assertEqual(self.radar.active_count(), 1)
        self.assertFalse(self.radar.engine.is_tracked("b"))

    def test_disconnect_only_touches_departing_ids(self):
        for e in self.entities.values():
            self.radar.on_connect(e)
        self.tick()
        before = {v: self.radar.engine.previous_marker_ids(v) for v in ("a", "c")}

        self.radar.on_disconnect(self.entities["b"])

        for viewer in ("a", "c"):
            after = self.radar.engine.previous_marker_ids(viewer)
            gone = before[viewer] - after
            self.assertEqual(len(gone), 1)
            self.assertTrue(all(mid.startswith("radar_b_") for mid in gone))
            self.assertFalse(any(mid.startswith("radar_b_") for mid in after))

    def test_disconnect_twice_is_noop(self):
        self.radar.on_connect(self.entities["a"])
        self.radar.on_connect(self.entities["b"])
        self.tick()
        self.radar.on_disconnect(self.entities["b"])
        calls = list(self.send.calls)

        self.assertFalse(self.radar.on_disconnect(self.entities["b"]))
        self.assertEqual(self.send.calls, calls)
        self.assertEqual(self.radar.active_count(), 1)

    def test_departed_player_absent_from_next_tick(self):
        self.radar.on_connect(self.entities["a"])
        self.radar.on_connect(self.entities["b"])
        self.tick()
        self.radar.on_disconnect(self.entities["b"])
        self.tick()
        self.assertEqual(self.send.last("a")[1], [])

    def test_broken_entity_does_not_block_other_viewers(self):
        self.radar.registry.add(self.entities["a"])
        self.radar.registry.add(self.entities["b"])
        self.radar.registry.add(Entity("x", "X", _raise_position, handle="x"))

        with self.assertLogs("radar", level="ERROR"):
            tick = self.tick()

        self.assertEqual(self.send.last("a")[1], [f"radar_b_{tick}"])
        self.assertEqual(self.send.last("b")[1], [f"radar_a_{tick}"])
        self.assertIsNone(self.send.last("x"))

    def test_status(self):
        self.radar.on_connect(self.entities["a"])
        status = self.radar.status()
        self.assertEqual(status["activeCount"], 1)
        self.assertEqual(status["intervalMs"], 10)
        self.assertFalse(status["running"])
        self.assertGreaterEqual(status["tick"], 1)

    def test_lifecycle_on_loop(self):
        self.radar.on_connect(self.entities["a"])
        self.radar.on_connect(self.entities["b"])

        async def run():
            self.radar.start()
            self.assertTrue(self.radar.running)
            await asyncio.sleep(0.05)
            self.radar.stop()

        asyncio.run(run())
        self.assertFalse(self.radar.running)
        self.assertGreaterEqual(len(self.send.for_handle("a")), 3)


if __name__ == "__main__":
    unittest.main()
