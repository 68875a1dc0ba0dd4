"""Orientation source fed by an external sensor bridge over UDP.

The bridge (for example a phone app forwarding its rotation-vector sensor)
owns device access and sensor fusion. This source only consumes JSON packets
from a local UDP port. Packets are either orientation samples:

    {"quaternion_wxyz": [w, x, y, z]}
    {"quaternion_xyzw": [x, y, z, w]}
    {"rotation_matrix": [r00, r01, r02, r10, ..., r22]}

or input messages understood by ``parse_command_payload`` (drag, mode,
reset, fly-to, touch), which are forwarded to the registered callbacks.
"""

from __future__ import annotations

import json
import logging
import socket
import time
from typing import Callable, Optional, Union

import numpy as np

from ..control.commands import TouchEvent, parse_command_payload
from ..control.orientation_source import OrientationSource
from ..math3d.quaternion import q_from_xyzw, q_normalize, rotmat_to_q

logger = logging.getLogger(__name__)


def _parse_orientation_payload(payload: dict) -> Optional[np.ndarray]:
    if "quaternion_wxyz" in payload:
        q = np.asarray(payload["quaternion_wxyz"], dtype=np.float64).reshape(-1)
        if q.size != 4:
            return None
    elif "quaternion_xyzw" in payload:
        q = np.asarray(payload["quaternion_xyzw"], dtype=np.float64).reshape(-1)
        if q.size != 4:
            return None
        q = q_from_xyzw(q)
    elif "rotation_matrix" in payload:
        m = np.asarray(payload["rotation_matrix"], dtype=np.float64).reshape(-1)
        if m.size != 9 or not np.isfinite(m).all():
            return None
        q = rotmat_to_q(m.reshape(3, 3))
    else:
        return None

    if not np.isfinite(q).all() or float(np.dot(q, q)) < 1e-12:
        return None
    return q_normalize(q)


def _parse_bridge_packet(data: bytes):
    """Decode one datagram into an orientation array, a command, a touch event or None."""
    try:
        payload = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return None
    if not isinstance(payload, dict):
        return None
    try:
        q = _parse_orientation_payload(payload)
    except (TypeError, ValueError):
        return None
    if q is not None:
        return q
    return parse_command_payload(payload)


class _UdpBridgeReceiver:
    def __init__(self, host: str, port: int):
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.sock.bind((host, int(port)))
        self.sock.setblocking(False)

    def recv_pending(self) -> list:
        messages = []
        while True:
            try:
                data, _ = self.sock.recvfrom(65535)
            except BlockingIOError:
                break
            except OSError:
                break
            parsed = _parse_bridge_packet(data)
            if parsed is not None:
                messages.append(parsed)
        return messages

    def close(self) -> None:
        self.sock.close()


class UdpBridgeOrientationSource(OrientationSource):
    """Device orientation + remote input over localhost UDP JSON."""

    name = "udp-bridge"

    def __init__(
        self,
        host: str = "127.0.0.1",
        port: int = 24568,
        poll_ms: int = 16,
        on_command: Optional[Callable[[object], None]] = None,
        on_touch: Optional[Callable[[TouchEvent], None]] = None,
    ):
        super().__init__()
        self.host = str(host)
        self.port = int(port)
        self.poll_s = max(0.001, float(poll_ms) / 1000.0)
        self.on_command = on_command
        self.on_touch = on_touch

        self._receiver: Optional[_UdpBridgeReceiver] = None
        self._closed = False
        self._status_text = ""
        self._last_warn_t = 0.0
        self._last_recv_t = 0.0
        self._recv_count = 0

        logger.info(
            "[SENSOR] source=udp-bridge (host=%s, port=%s, poll_ms=%.1f)",
            self.host,
            self.port,
            self.poll_s * 1000.0,
        )

    def start(self) -> None:
        if self._receiver is None:
            self._receiver = _UdpBridgeReceiver(self.host, self.port)

    def stop(self) -> None:
        if self._receiver is None:
            return
        try:
            self._receiver.close()
        except OSError:
            pass
        self._receiver = None

    def set_status(self, text: str) -> None:
        self._status_text = text

    def _dispatch(self, message: Union[np.ndarray, TouchEvent, object]) -> None:
        if isinstance(message, np.ndarray):
            self._publish_sample(message)
        elif isinstance(message, TouchEvent):
            if self.on_touch is not None:
                self.on_touch(message)
        elif self.on_command is not None:
            self.on_command(message)

    def _poll_once(self) -> None:
        if self._receiver is None:
            return
        messages = self._receiver.recv_pending()
        now = time.time()
        if not messages:
            # Only log if we have not received any packet recently.
            if (now - self._last_recv_t) > 2.0 and (now - self._last_warn_t) > 2.0:
                logger.info(
                    "[SENSOR] waiting for bridge packets on %s:%s",
                    self.host,
                    self.port,
                )
                self._last_warn_t = now
            return

        self._last_recv_t = now
        self._recv_count += len(messages)
        for message in messages:
            self._dispatch(message)

    def run(self, on_tick):
        self.start()
        while not self._closed:
            self._poll_once()
            on_tick()
            time.sleep(self.poll_s)
        self.stop()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.stop()
