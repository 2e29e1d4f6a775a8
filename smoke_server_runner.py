import asyncio
import logging

from radar_config import RadarConfig
from radar_server import RadarServer


async def run_server():
    # No status service and no config file: just the TCP host plus radar
    server = RadarServer(RadarConfig(update_interval_ms=1000))
    tcp_server = await asyncio.start_server(server.handle_client, '127.0.0.1', 5000)
    print('[SMOKE] RadarServer running on 127.0.0.1:5000')

    server.radar.start()
    try:
        async with tcp_server:
            await tcp_server.serve_forever()
    finally:
        server.radar.stop()

if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    asyncio.run(run_server())
