from protocol import PacketType
from . import BasePacket
from .registry import register_packet


class PositionPacket(BasePacket):
    def position(self, default=(0.0, 0.0, 0.0)):
        """(x, y, z) as floats; missing axes fall back to `default`.

        Raises ValueError/TypeError for coordinates that are not numbers.
        """
        return (
            float(self._data.get("x", default[0])),
            float(self._data.get("y", default[1])),
            float(self._data.get("z", default[2])),
        )


@register_packet
class PingPacket(BasePacket):
    packet_id = PacketType.PING


@register_packet
class PongPacket(BasePacket):
    packet_id = PacketType.PONG


@register_packet
class PlayerJoinPacket(PositionPacket):
    packet_id = PacketType.PLAYER_JOIN


@register_packet
class PlayerIdAssignedPacket(BasePacket):
    packet_id = PacketType.PLAYER_ID_ASSIGNED


@register_packet
class PlayerMovePacket(PositionPacket):
    packet_id = PacketType.PLAYER_MOVE


@register_packet
class PlayerLeavePacket(BasePacket):
    packet_id = PacketType.PLAYER_LEAVE
