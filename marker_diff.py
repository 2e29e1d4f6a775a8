# marker_diff.py
import logging
import threading

from markers import build_marker

logger = logging.getLogger("radar.diff")


class MarkerUpdate:
    """What one pass sent to one viewer."""

    def __init__(self, viewer_id, added, removed):
        self.viewer_id = viewer_id
        self.added = added      # list[Marker]
        self.removed = removed  # list[str] of marker ids

    def __repr__(self):
        return f"<MarkerUpdate {self.viewer_id} +{len(self.added)} -{len(self.removed)}>"


class MarkerDiffEngine:
    """Computes and sends per-viewer compass marker updates.

    Marker ids embed a pass counter, so a marker can never be updated in
    place: every pass retires the viewer's whole previous set and adds a fresh
    one. The engine is the only owner of the previous-marker sets.

    `send(handle, added_markers, removed_ids)` is the transport primitive; it
    may raise, in which case the viewer's previous set is left untouched.
    """

    def __init__(self, send, icon, prefix):
        self._send = send
        self.icon = icon
        self.prefix = prefix
        # viewer_id -> {marker_id: target entity_id}
        self._previous = {}
        # viewer_id -> lock serializing that viewer's passes
        self._pass_locks = {}
        self._lock = threading.Lock()
        self._tick = 0
        self._tick_lock = threading.Lock()

    @property
    def tick(self) -> int:
        return self._tick

    def next_tick(self) -> int:
        with self._tick_lock:
            self._tick += 1
            return self._tick

    def track(self, viewer_id):
        # Re-registering an id keeps what its client is still displaying
        with self._lock:
            self._previous.setdefault(viewer_id, {})

    def forget(self, viewer_id):
        with self._lock:
            self._previous.pop(viewer_id, None)
            self._pass_locks.pop(viewer_id, None)

    def is_tracked(self, viewer_id) -> bool:
        with self._lock:
            return viewer_id in self._previous

    def previous_marker_ids(self, viewer_id) -> frozenset:
        with self._lock:
            return frozenset(self._previous.get(viewer_id, ()))

    def _pass_lock(self, viewer_id):
        with self._lock:
            lock = self._pass_locks.get(viewer_id)
            if lock is None:
                lock = self._pass_locks[viewer_id] = threading.Lock()
            return lock

    def _build_markers(self, viewer_id, viewer_pos, entities, tracked, tick):
        markers = []
        targets = {}
        for target in entities:
            if target.entity_id == viewer_id or target.entity_id not in tracked:
                continue
            try:
                marker = build_marker(target, viewer_pos, tick, self.icon, self.prefix)
            except Exception:
                logger.exception("[ERROR] Could not build marker of %s for %s", target.entity_id, viewer_id)
                continue
            markers.append(marker)
            targets[marker.marker_id] = target.entity_id
        return markers, targets

    def update_viewer(self, viewer, entities, tick) -> MarkerUpdate:
        """Send `viewer` a full marker refresh for every other tracked entity.

        Passes for the same viewer are serialized; the shared maps are only
        locked while they are read and committed, never across `send`.
        """
        viewer_id = viewer.entity_id
        with self._pass_lock(viewer_id):
            with self._lock:
                tracked = set(self._previous)
                removed = list(self._previous.get(viewer_id, {}))

            viewer_pos = viewer.position()
            markers, targets = self._build_markers(viewer_id, viewer_pos, entities, tracked, tick)
            self._send(viewer.handle, markers, removed)

            with self._lock:
                # A viewer that disconnected mid-pass must not be resurrected
                if viewer_id in self._previous:
                    self._previous[viewer_id] = targets
        return MarkerUpdate(viewer_id, markers, removed)

    def retire(self, entity_id, viewers):
        """Explicitly remove `entity_id`'s markers from every other viewer.

        After this call no new pass produces markers for the entity. Returns
        {viewer_id: removed ids}.
        """
        pending = []
        with self._lock:
            self._previous.pop(entity_id, None)
            self._pass_locks.pop(entity_id, None)
            for viewer in viewers:
                if viewer.entity_id == entity_id:
                    continue
                prev = self._previous.get(viewer.entity_id) or {}
                stale = [mid for mid, target in prev.items() if target == entity_id]
                if stale:
                    pending.append((viewer, stale))

        retired = {}
        for viewer, stale in pending:
            viewer_id = viewer.entity_id
            try:
                self._send(viewer.handle, [], stale)
            except Exception:
                # Left in the previous set; the viewer's next pass removes them
                logger.exception("[ERROR] Failed to remove markers of %s from %s", entity_id, viewer_id)
                continue
            with self._lock:
                prev = self._previous.get(viewer_id)
                if prev is not None:
                    for mid in stale:
                        prev.pop(mid, None)
            retired[viewer_id] = stale
        return retired
