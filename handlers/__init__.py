"""Handlers package for packet logic.
Player handlers expose async functions with signature:
    async def handle_xxx(server, writer, packet_or_data)
world_map holds the outbound marker transport used by the radar.
"""

__all__ = ["player", "world_map"]
