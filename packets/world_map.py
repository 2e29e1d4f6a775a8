from protocol import PacketType
from . import BasePacket
from .registry import register_packet


@register_packet
class UpdateWorldMapPacket(BasePacket):
    """Adds and/or removes compass markers on the client.

    Fields: chunks (always None here), addedMarkers (list of marker dicts),
    removedMarkers (list of marker ids).
    """
    packet_id = PacketType.UPDATE_WORLD_MAP

    @classmethod
    def removal(cls, marker_ids):
        return cls(chunks=None, addedMarkers=[], removedMarkers=list(marker_ids))

    @classmethod
    def addition(cls, markers):
        return cls(chunks=None, addedMarkers=[m.to_data() for m in markers], removedMarkers=[])
