# radar_server.py
import argparse
import asyncio
import logging

from packet_factory import PacketFactory
from packet_handler import PacketHandler
from radar_config import load_config
from radar_system import RadarSystem
from status_service import serve as status_serve

logger = logging.getLogger("radar.server")


class RadarServer:
    def __init__(self, config=None, radar=None):
        self.clients = {}  # writer -> player_id
        self.client_positions = {}  # player_id -> (x, y, z)
        self.entities = {}  # player_id -> Entity handed to the radar

        self.radar = radar or RadarSystem(config)
        self.packet_handler = PacketHandler(self)

    async def handle_client(self, reader, writer):
        addr = writer.get_extra_info("peername")
        logger.info("[CONNECT] %s", addr)

        try:
            while True:
                data = await reader.readline()
                if not data:
                    break

                message = data.decode().strip()
                if not message:
                    continue

                logger.debug("[RECV] From %s: %s", addr, message)
                try:
                    await self.packet_handler.process_packet(message, addr, writer)
                except Exception:
                    logger.exception("[ERROR] Failed to process packet from %s", addr)
        except ConnectionError as e:
            logger.info("[CONNECT] %s dropped: %s", addr, e)
        finally:
            player_id = self.clients.get(writer)
            if player_id:
                logger.info("[DISCONNECT] %s, player %s", addr, player_id)
            self.disconnect(writer)
            writer.close()
            try:
                await writer.wait_closed()
            except ConnectionError:
                pass

    def disconnect(self, writer):
        """Drop everything known about the player behind `writer`. Idempotent."""
        player_id = self.clients.pop(writer, None)
        if player_id is None:
            return None
        entity = self.entities.pop(player_id, None)
        if entity is not None:
            self.radar.on_disconnect(entity)
        self.client_positions.pop(player_id, None)
        return player_id

    async def send_packet(self, writer, packet):
        writer.write(PacketFactory.build_packet(packet).encode())
        await writer.drain()


async def main(host="127.0.0.1", port=5000, status_port=7000, config_file="radar.json"):
    config = load_config(config_file)
    server = RadarServer(config)

    tcp_server = await asyncio.start_server(server.handle_client, host, port)
    logger.info("[SERVER] Running RadarServer on %s:%s", host, port)

    status_server = None
    if status_port:
        status_server, _ = status_serve(server.radar, port=status_port)

    server.radar.start()
    try:
        async with tcp_server:
            await tcp_server.serve_forever()
    finally:
        logger.info("[RADAR] Shutting down...")
        server.radar.stop()
        if status_server is not None:
            status_server.stop(grace=None)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Player radar server")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=5000)
    parser.add_argument("--status-port", type=int, default=7000, help="gRPC status port, 0 to disable")
    parser.add_argument("--config", default="radar.json")
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args(argv)


def run(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    try:
        asyncio.run(main(args.host, args.port, args.status_port, args.config))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
