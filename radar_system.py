# radar_system.py
import logging

from entity_registry import EntityRegistry
from handlers.world_map import send_marker_update
from marker_diff import MarkerDiffEngine
from radar_config import RadarConfig
from radar_scheduler import BroadcastScheduler

logger = logging.getLogger("radar.system")


class RadarSystem:
    """Shows every other connected player on each player's HUD compass.

    The host calls on_connect/on_disconnect from its own event context and
    start/stop around its lifetime; everything else runs on the scheduler.
    """

    def __init__(self, config: RadarConfig = None, send=send_marker_update, loop=None):
        self.config = config or RadarConfig()
        self.engine = MarkerDiffEngine(send, self.config.marker_image, self.config.marker_prefix)
        self.registry = EntityRegistry(viewer_state=self.engine)
        self.scheduler = BroadcastScheduler(
            self.registry, self.engine, self.config.update_interval, loop=loop
        )

    def start(self):
        return self.scheduler.start()

    def stop(self):
        self.scheduler.stop()

    @property
    def running(self) -> bool:
        return self.scheduler.running

    def on_connect(self, entity):
        """Track a new player and send them all existing peers right away."""
        self.registry.add(entity)
        logger.info("[RADAR] Player connected: %s (tracking %d players)", entity.label, self.registry.count())

        # Other viewers pick up the newcomer on their next regular tick
        tick = self.engine.next_tick()
        try:
            return self.engine.update_viewer(entity, self.registry.snapshot(), tick)
        except Exception:
            logger.exception("[ERROR] Failed to send initial markers to %s", entity.label)
            return None

    def on_disconnect(self, entity):
        """Retire a player's markers everywhere, then stop tracking them.

        A second call for the same player does nothing.
        """
        entity_id = entity.entity_id
        if self.registry.get(entity_id) is None:
            return False

        self.engine.retire(entity_id, self.registry.snapshot())
        self.registry.remove(entity_id)
        logger.info("[RADAR] Player disconnected: %s (tracking %d players)", entity.label, self.registry.count())
        return True

    def active_count(self) -> int:
        return self.registry.count()

    def status(self):
        return {
            "activeCount": self.active_count(),
            "tick": self.engine.tick,
            "running": self.running,
            "intervalMs": self.config.update_interval_ms,
        }
