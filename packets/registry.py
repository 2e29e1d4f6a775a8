from typing import Type, Dict, Optional


_registry: Dict[int, Type] = {}


def register_packet(cls: Type):
    pid = getattr(cls, "packet_id", None)
    if pid is None:
        raise ValueError("packet class must define packet_id")
    if pid in _registry and _registry[pid] is not cls:
        raise ValueError(f"packet id {pid} already registered to {_registry[pid].__name__}")
    _registry[pid] = cls
    return cls


def get_packet_class(packet_id) -> Optional[Type]:
    return _registry.get(packet_id)
