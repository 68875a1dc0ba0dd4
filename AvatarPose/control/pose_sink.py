"""Pose record sinks (renderer bridge / network broadcaster side)."""

from __future__ import annotations

import logging
import socket

import numpy as np

from .pose import POSE_RECORD_SIZE

logger = logging.getLogger(__name__)


def encode_pose_record(record: np.ndarray) -> bytes:
    """28 bytes: seven little-endian float32 values in record order."""
    r = np.asarray(record, dtype="<f4").reshape(POSE_RECORD_SIZE)
    return r.tobytes()


def decode_pose_record(data: bytes) -> np.ndarray | None:
    """Receiver side of `encode_pose_record`. Returns None on a wrong-sized datagram."""
    if len(data) != POSE_RECORD_SIZE * 4:
        return None
    return np.frombuffer(data, dtype="<f4").astype(np.float32)


class PoseSink:
    """Base interface for pose record consumers."""

    def send(self, record: np.ndarray) -> None:
        raise NotImplementedError

    def __call__(self, record: np.ndarray) -> None:
        self.send(record)

    def close(self) -> None:
        pass


class UdpPoseSink(PoseSink):
    """Fire-and-forget datagram per frame."""

    def __init__(self, host: str, port: int):
        self.host = str(host)
        self.port = int(port)
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.sock.setblocking(False)
        self._send_errors = 0
        logger.info("[SINK] udp pose sink -> %s:%s", self.host, self.port)

    def send(self, record: np.ndarray) -> None:
        try:
            self.sock.sendto(encode_pose_record(record), (self.host, self.port))
        except OSError:
            self._send_errors += 1
            if self._send_errors == 1:
                logger.warning(
                    "[SINK] failed to send pose record to %s:%s",
                    self.host,
                    self.port,
                    exc_info=True,
                )

    def close(self) -> None:
        self.sock.close()
