class PacketType:
    PING = 1
    PONG = 2
    PLAYER_JOIN = 6
    PLAYER_ID_ASSIGNED = 7
    PLAYER_MOVE = 8
    PLAYER_LEAVE = 13
    # Compass/world map marker changes (server -> client)
    UPDATE_WORLD_MAP = 20
