from errors import DeliveryError
from packet_factory import PacketFactory
from packets.world_map import UpdateWorldMapPacket


def build_marker_frames(markers, removed_ids):
    """Encode one marker update as wire frames: removals first, then additions."""
    frames = []
    if removed_ids:
        frames.append(PacketFactory.build_packet(UpdateWorldMapPacket.removal(removed_ids)))
    if markers:
        frames.append(PacketFactory.build_packet(UpdateWorldMapPacket.addition(markers)))
    return frames


def send_marker_update(writer, markers, removed_ids):
    """Queue a marker update on `writer` without waiting for the flush.

    Raises DeliveryError when the connection is already closing or the write
    itself fails.
    """
    if writer is None:
        raise DeliveryError("viewer has no connection handle")
    if writer.is_closing():
        raise DeliveryError("viewer connection is closing")
    for frame in build_marker_frames(markers, removed_ids):
        try:
            writer.write(frame.encode())
        except (OSError, RuntimeError) as e:
            raise DeliveryError(f"write failed: {e}") from e
