from typing import Dict, Any, Optional
from .registry import register_packet, get_packet_class


class BasePacket:
    packet_id: int = None

    def __init__(self, **kwargs):
        # keep raw fields so unknown keys survive a parse
        self._data = dict(kwargs)

    @classmethod
    def from_data(cls, data: Dict[str, Any]):
        return cls(**data)

    def to_data(self) -> Dict[str, Any]:
        return dict(self._data)

    def to_frame(self) -> Dict[str, Any]:
        """Wire form: {"id": packet_id, "data": {...}}."""
        return {"id": self.packet_id, "data": self.to_data()}

    def __getattr__(self, item):
        # __getattr__ runs before _data exists during unpickling/copy
        if item == "_data":
            raise AttributeError(item)
        if item in self._data:
            return self._data[item]
        raise AttributeError(item)


def parse_raw_packet(raw: Dict[str, Any]) -> Optional[BasePacket]:
    """Parse a raw frame dict (keys 'id' and 'data') into a packet object.

    Unknown ids come back as a plain BasePacket with '_raw_id' set.
    """
    if not raw:
        return None
    pid = raw.get("id")
    data = raw.get("data", {}) or {}
    if not isinstance(data, dict):
        data = {"value": data}
    cls = get_packet_class(pid)
    if cls:
        return cls.from_data(data)
    p = BasePacket(**data)
    p._data["_raw_id"] = pid
    return p


__all__ = [
    "BasePacket",
    "parse_raw_packet",
    "register_packet",
]

# Concrete packet modules register themselves on import.
from . import session as session_packets  # noqa: F401,E402
from . import world_map as world_map_packets  # noqa: F401,E402
