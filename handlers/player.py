import logging
import uuid

from entity_registry import Entity
from packets.session import PlayerIdAssignedPacket, PlayerJoinPacket, PlayerMovePacket, PongPacket

logger = logging.getLogger("radar.handlers.player")


def normalize(packet_or_data):
    if hasattr(packet_or_data, "_data"):
        return packet_or_data.to_data()
    return packet_or_data.get("data", {}) if isinstance(packet_or_data, dict) else dict()


def as_packet(packet_or_data, packet_cls):
    """Accept either a parsed packet or a raw {"data": ...} dict."""
    if isinstance(packet_or_data, packet_cls):
        return packet_or_data
    return packet_cls.from_data(normalize(packet_or_data))


async def handle_ping(server, writer, packet_or_data):
    await server.send_packet(writer, PongPacket(msg="pong"))


async def handle_player_join(server, writer, packet_or_data):
    packet = as_packet(packet_or_data, PlayerJoinPacket)
    data = packet.to_data()
    if writer in server.clients:
        logger.warning("[WARN] Duplicate join from %s, ignoring", server.clients[writer])
        return

    try:
        spawn_pos = packet.position()
    except (TypeError, ValueError):
        logger.warning("[WARN] Join with invalid coordinates: %s", data)
        return

    # Ids are always strings; compare in that form so 5 and "5" collide
    preferred_id = data.get("preferredId")
    preferred_id = str(preferred_id) if preferred_id not in (None, "") else None
    if preferred_id and preferred_id not in server.client_positions:
        assigned_id = preferred_id
    else:
        assigned_id = str(uuid.uuid4())
    nickname = data.get("nickname") or assigned_id

    server.clients[writer] = assigned_id
    server.client_positions[assigned_id] = spawn_pos

    logger.info("[JOIN] Player %s (%s) joined at %s", assigned_id, nickname, spawn_pos)
    await server.send_packet(writer, PlayerIdAssignedPacket(assignedId=assigned_id))

    positions = server.client_positions

    def live_position(pid=assigned_id, last=spawn_pos):
        return positions.get(pid, last)

    entity = Entity(assigned_id, nickname, live_position, handle=writer)
    server.entities[assigned_id] = entity
    server.radar.on_connect(entity)


async def handle_player_move(server, writer, packet_or_data):
    packet = as_packet(packet_or_data, PlayerMovePacket)

    player_id = server.clients.get(writer)
    if not player_id:
        logger.warning("[WARN] Move packet from unregistered client")
        return

    old_pos = server.client_positions.get(player_id, (0.0, 0.0, 0.0))
    try:
        new_pos = packet.position(default=old_pos)
    except (TypeError, ValueError):
        logger.warning("[WARN] Move with invalid coordinates from %s: %s", player_id, packet.to_data())
        return

    # The radar reads this on its next tick
    server.client_positions[player_id] = new_pos
    logger.debug("[MOVE] Player %s -> (%.2f, %.2f, %.2f)", player_id, *new_pos)


async def handle_player_leave(server, writer, packet_or_data):
    player_id = server.clients.get(writer, "unknown")
    logger.info("[LEAVE] Player %s left", player_id)
    server.disconnect(writer)
    writer.close()
    await writer.wait_closed()
