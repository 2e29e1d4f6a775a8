import socket
import json
import time
from protocol import PacketType


def connect(nickname, x, z):
    s = socket.create_connection(('127.0.0.1', 5000))
    s.send((json.dumps({"id": PacketType.PLAYER_JOIN,
                        "data": {"nickname": nickname, "x": x, "y": 0, "z": z}}) + "\n").encode())
    time.sleep(0.05)
    return s


alice = connect("alice", 0, 0)
bob = connect("bob", 30, 40)

# Bob walks closer; alice should see the distance shrink on the next ticks
bob.send((json.dumps({"id": PacketType.PLAYER_MOVE, "data": {"x": 3, "y": 0, "z": 4}}) + "\n").encode())

alice.settimeout(2.5)
try:
    while True:
        chunk = alice.recv(65536)
        if not chunk:
            break
        for line in chunk.decode().splitlines():
            frame = json.loads(line)
            if frame["id"] == PacketType.UPDATE_WORLD_MAP:
                data = frame["data"]
                print('ALICE +', [m["name"] for m in data["addedMarkers"]], '-', data["removedMarkers"])
except (socket.timeout, ValueError):
    pass

bob.send((json.dumps({"id": PacketType.PLAYER_LEAVE, "data": {}}) + "\n").encode())
bob.close()
alice.close()
print('client done')
