# entity_registry.py
import threading
from typing import Callable, Dict, List, Optional, Tuple

Position = Tuple[float, float, float]


class Entity:
    """A connected participant as the radar sees it.

    `position` is a live accessor: it is called fresh on every pass because
    the host owns and mutates the actual coordinates. `handle` is whatever the
    transport needs to deliver an update (a stream writer for the TCP host).
    """

    def __init__(self, entity_id: str, label: str, position: Callable[[], Position], handle=None):
        self.entity_id = entity_id
        self.label = label
        self._position = position
        self.handle = handle

    def position(self) -> Position:
        x, y, z = self._position()
        return (float(x), float(y), float(z))

    def __repr__(self):
        return f"<Entity {self.entity_id} label={self.label!r}>"


class EntityRegistry:
    def __init__(self, viewer_state=None):
        # {entity_id: Entity}
        self._entities: Dict[str, Entity] = {}
        self._lock = threading.Lock()
        # Diff engine (or anything with track/forget) that owns per-viewer state
        self._viewer_state = viewer_state

    def add(self, entity: Entity):
        with self._lock:
            self._entities[entity.entity_id] = entity
        if self._viewer_state is not None:
            self._viewer_state.track(entity.entity_id)

    def remove(self, entity_id: str) -> Optional[Entity]:
        """Remove an entity; returns it, or None when the id was not registered."""
        with self._lock:
            entity = self._entities.pop(entity_id, None)
        if entity is not None and self._viewer_state is not None:
            self._viewer_state.forget(entity_id)
        return entity

    def get(self, entity_id: str) -> Optional[Entity]:
        with self._lock:
            return self._entities.get(entity_id)

    def snapshot(self) -> List[Entity]:
        with self._lock:
            return list(self._entities.values())

    def count(self) -> int:
        with self._lock:
            return len(self._entities)
