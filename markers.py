# markers.py
import math


class Marker:
    def __init__(self, marker_id, label, icon, position):
        self.marker_id = marker_id
        self.label = label
        self.icon = icon
        self.position = position  # (x, y, z)

    def to_data(self):
        x, y, z = self.position
        return {
            "id": self.marker_id,
            "name": self.label,
            "markerImage": self.icon,
            "transform": {
                "position": {"x": x, "y": y, "z": z},
                "orientation": {"yaw": 0.0, "pitch": 0.0, "roll": 0.0},
            },
            "contextMenuItems": None,
        }

    def __eq__(self, other):
        if not isinstance(other, Marker):
            return NotImplemented
        return (self.marker_id, self.label, self.icon, self.position) == \
            (other.marker_id, other.label, other.icon, other.position)

    def __hash__(self):
        return hash(self.marker_id)

    def __repr__(self):
        return f"<Marker {self.marker_id} {self.label!r}>"


def distance_between(a, b) -> int:
    """Euclidean distance between two (x, y, z) points, truncated to whole meters."""
    dx, dy, dz = b[0] - a[0], b[1] - a[1], b[2] - a[2]
    return int(math.sqrt(dx * dx + dy * dy + dz * dz))


def marker_id_for(prefix, entity_id, tick) -> str:
    return f"{prefix}{entity_id}_{tick}"


def build_marker(target, viewer_pos, tick, icon, prefix) -> Marker:
    pos = target.position()
    distance = distance_between(viewer_pos, pos)
    return Marker(
        marker_id_for(prefix, target.entity_id, tick),
        f"{target.label} ({distance}m)",
        icon,
        pos,
    )
