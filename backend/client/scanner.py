"""
Camera barcode scanner.

OpenCV grabs frames, pyzbar decodes them. One scan session yields exactly
one code; the caller stops the scanner afterwards. Use `session()` so the
camera is released on every exit path:

    async with scanner.session(device_id) as s:
        code = await s.read_code()
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, Callable, List, Optional
from urllib.parse import urlparse

import cv2

logger = logging.getLogger(__name__)

FRAME_WIDTH = 1280
FRAME_HEIGHT = 720
MAX_PROBED_DEVICES = 4
POLL_INTERVAL = 0.05

LOCAL_HOSTS = {"localhost", "127.0.0.1", "::1"}
PREFERRED_LABEL = re.compile(r"back|rear|environment", re.IGNORECASE)


class ScannerError(RuntimeError):
    pass


class PermissionDenied(ScannerError):
    pass


class CameraUnavailable(ScannerError):
    pass


class InsecureContext(ScannerError):
    pass


@dataclass(frozen=True)
class CameraDevice:
    device_id: str
    label: str


def is_secure_origin(origin: Optional[str]) -> bool:
    """Camera access is only allowed from https origins or a local host."""
    if not origin:
        return False
    parsed = urlparse(origin)
    if parsed.scheme == "https":
        return True
    return (parsed.hostname or "").lower() in LOCAL_HOSTS


def preferred_device(devices: List[CameraDevice]) -> Optional[CameraDevice]:
    for d in devices:
        if PREFERRED_LABEL.search(d.label):
            return d
    return devices[0] if devices else None


def decode_frame(frame: Any) -> Optional[str]:
    """Decode the first retail barcode in a BGR frame, if any."""
    # pyzbar loads the zbar shared library on import
    from pyzbar.pyzbar import ZBarSymbol, decode

    gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY) if getattr(frame, "ndim", 2) == 3 else frame
    symbols = [
        ZBarSymbol.EAN13,
        ZBarSymbol.EAN8,
        ZBarSymbol.UPCA,
        ZBarSymbol.UPCE,
        ZBarSymbol.CODE128,
    ]
    for barcode in decode(gray, symbols=symbols):
        text = barcode.data.decode("utf-8", errors="replace").strip()
        if text:
            return text
    return None


def _device_node(index: int) -> str:
    return f"/dev/video{index}"


def check_camera_permission(index: int) -> None:
    """Raise PermissionDenied when the OS exposes the device but we can't open it."""
    node = _device_node(index)
    if os.path.exists(node) and not os.access(node, os.R_OK | os.W_OK):
        raise PermissionDenied(f"No permission to open {node}")


class BarcodeScanner:
    def __init__(
        self,
        origin: Optional[str],
        *,
        capture_factory: Callable[[int], Any] = cv2.VideoCapture,
        decoder: Callable[[Any], Optional[str]] = decode_frame,
        permission_check: Callable[[int], None] = check_camera_permission,
        max_devices: int = MAX_PROBED_DEVICES,
        poll_interval: float = POLL_INTERVAL,
    ):
        self.origin = origin
        self._capture_factory = capture_factory
        self._decoder = decoder
        self._permission_check = permission_check
        self.max_devices = max_devices
        self.poll_interval = poll_interval

        self._capture = None
        self._emitted = False

    @property
    def scanning(self) -> bool:
        return self._capture is not None

    def list_devices(self) -> List[CameraDevice]:
        """
        Probe video inputs. Returns [] when camera access is refused so manual
        UPC entry stays available.
        """
        try:
            self._permission_check(0)
        except PermissionDenied as e:
            logger.info("Camera permission refused: %s", e)
            return []

        devices: List[CameraDevice] = []
        for index in range(self.max_devices):
            cap = self._capture_factory(index)
            try:
                if not cap.isOpened():
                    continue
                backend = ""
                if hasattr(cap, "getBackendName"):
                    try:
                        backend = cap.getBackendName()
                    except cv2.error:
                        backend = ""
                label = f"Camera {index} ({backend})" if backend else f"Camera {index}"
                devices.append(CameraDevice(device_id=str(index), label=label))
            finally:
                cap.release()
        return devices

    def start(self, device_id: Optional[str] = None) -> None:
        if not is_secure_origin(self.origin):
            raise InsecureContext(f"Camera requires HTTPS or localhost (origin: {self.origin!r})")
        if self.scanning:
            return

        if device_id is None:
            chosen = preferred_device(self.list_devices())
            index = int(chosen.device_id) if chosen else 0
        else:
            try:
                index = int(device_id)
            except ValueError as e:
                raise CameraUnavailable(f"Unknown camera device {device_id!r}") from e

        self._permission_check(index)

        cap = self._capture_factory(index)
        if not cap.isOpened():
            cap.release()
            raise CameraUnavailable(f"Unable to open camera {index}")
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, FRAME_WIDTH)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, FRAME_HEIGHT)

        self._capture = cap
        self._emitted = False
        logger.debug("Scanner started on camera %s", index)

    async def read_code(self) -> str:
        """Poll frames until the first decode. Emits once per session."""
        if self._capture is None:
            raise ScannerError("Scanner is not started")
        if self._emitted:
            raise ScannerError("Scan session already produced a code; stop and start again")

        while True:
            cap = self._capture
            if cap is None:
                raise ScannerError("Scanner was stopped")
            try:
                ok, frame = await asyncio.to_thread(cap.read)
                if not ok:
                    raise CameraUnavailable("Failed to read camera frame")
                code = self._decoder(frame)
            except ScannerError:
                raise
            except Exception as e:
                # cv2.error, or ImportError when libzbar is missing
                raise CameraUnavailable(f"Barcode decoding failed: {e}") from e
            if code:
                self._emitted = True
                return code
            await asyncio.sleep(self.poll_interval)

    def stop(self) -> None:
        cap, self._capture = self._capture, None
        if cap is not None:
            cap.release()
            logger.debug("Scanner stopped")

    @asynccontextmanager
    async def session(self, device_id: Optional[str] = None):
        self.start(device_id)
        try:
            yield self
        finally:
            self.stop()
