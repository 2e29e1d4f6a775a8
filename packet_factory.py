import json


class PacketFactory:
    @staticmethod
    def build(packet_id: int, data: dict) -> str:
        """Serialize a packet to a newline-terminated JSON frame."""
        packet = {"id": packet_id, "data": data}
        return json.dumps(packet) + "\n"

    @staticmethod
    def build_packet(packet) -> str:
        return PacketFactory.build(packet.packet_id, packet.to_data())
