import json
import logging

from handlers import player as player_handlers
from packets import parse_raw_packet
from protocol import PacketType

logger = logging.getLogger("radar.packets")

HANDLERS = {
    PacketType.PING: player_handlers.handle_ping,
    PacketType.PLAYER_JOIN: player_handlers.handle_player_join,
    PacketType.PLAYER_MOVE: player_handlers.handle_player_move,
    PacketType.PLAYER_LEAVE: player_handlers.handle_player_leave,
}


class PacketHandler:
    def __init__(self, server, handlers=None):
        self.server = server
        self.handlers = dict(HANDLERS if handlers is None else handlers)

    async def process_packet(self, message, address, writer):
        """Decode one JSON line and dispatch it. Returns True if a handler ran."""
        try:
            raw = json.loads(message)
        except json.JSONDecodeError as e:
            logger.warning("[ERROR] Malformed packet from %s: %s", address, e)
            return False
        if not isinstance(raw, dict):
            logger.warning("[ERROR] Packet from %s is not an object: %r", address, raw)
            return False

        packet = parse_raw_packet(raw)
        if packet is None:
            return False

        packet_id = packet.packet_id if packet.packet_id is not None else packet._data.get("_raw_id")
        handler = self.handlers.get(packet_id)
        if handler is None:
            logger.warning("[ERROR] Unknown packet type %s from %s", packet_id, address)
            return False

        await handler(self.server, writer, packet)
        return True
