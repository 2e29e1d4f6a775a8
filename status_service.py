import json
import logging
from concurrent import futures

import grpc

logger = logging.getLogger("radar.status")

SERVICE_NAME = "radar.RadarStatus"
GET_STATUS_METHOD = f"/{SERVICE_NAME}/GetStatus"


def _deserialize(raw: bytes):
    if not raw:
        return {}
    return json.loads(raw.decode())


def _serialize(message) -> bytes:
    return json.dumps(message).encode()


class RadarStatusService:
    """Read-only view of the radar for operators (JSON over gRPC)."""

    def __init__(self, radar):
        self.radar = radar

    def GetStatus(self, request, context):
        return self.radar.status()

    def handler(self):
        return grpc.method_handlers_generic_handler(SERVICE_NAME, {
            "GetStatus": grpc.unary_unary_rpc_method_handler(
                self.GetStatus,
                request_deserializer=_deserialize,
                response_serializer=_serialize,
            ),
        })


# === gRPC Server Bootstrap ===
def serve(radar, port=7000, host="[::]"):
    """Start the status service; returns (grpc server, bound port)."""
    service = RadarStatusService(radar)
    server = grpc.server(futures.ThreadPoolExecutor(max_workers=4))
    server.add_generic_rpc_handlers((service.handler(),))
    bound = server.add_insecure_port(f"{host}:{port}")
    server.start()
    logger.info("[STATUS SERVICE] gRPC RadarStatus running on port %s", bound)
    return server, bound


def fetch_status(target="127.0.0.1:7000", timeout=2.0):
    """Client helper: call GetStatus on a running status service."""
    with grpc.insecure_channel(target) as channel:
        get_status = channel.unary_unary(
            GET_STATUS_METHOD,
            request_serializer=_serialize,
            response_deserializer=_deserialize,
        )
        return get_status({}, timeout=timeout)
