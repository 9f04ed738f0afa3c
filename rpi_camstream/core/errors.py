"""Exception types raised by rpi_camstream."""

from __future__ import annotations

from typing import Optional


class CameraError(RuntimeError):
    """Base class for all camera capture errors."""


class CaptureStartError(CameraError):
    """The capture process could not be launched or produced no output."""


class PipeUnavailableError(CaptureStartError):
    """A spawned process is missing one of its output pipes."""


class CaptureAlreadyRunningError(CameraError):
    """``start()`` was called while a capture session is still active."""


class SignatureResolutionError(CameraError):
    """No JPEG start signature is known for the host model."""

    def __init__(self, model: Optional[str]) -> None:
        self.model = model
        super().__init__(
            f"Could not determine JPEG signature. Unknown system model '{model}'"
        )


class CodecMismatchError(CameraError, ValueError):
    """An operation requires a codec the camera is not configured for."""


class CaptureStreamError(CameraError):
    """Runtime problem reported by the capture process or its pipes."""


class FrameBufferOverflowError(CameraError):
    """The rolling frame buffer grew past its limit without a frame boundary."""

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(
            f"Frame buffer overflow: {size} bytes buffered without a frame boundary "
            f"(limit {limit})"
        )


class CaptureClosedError(CameraError):
    """The capture session closed before a requested frame arrived."""


class ProcessOutputError(CameraError):
    """A one-shot process wrote to stderr."""

    def __init__(self, command: str, stderr: bytes) -> None:
        self.command = command
        self.stderr = stderr
        super().__init__(stderr.decode(errors="replace").strip() or f"{command} failed")


__all__ = [
    "CameraError",
    "CaptureStartError",
    "PipeUnavailableError",
    "CaptureAlreadyRunningError",
    "SignatureResolutionError",
    "CodecMismatchError",
    "CaptureStreamError",
    "FrameBufferOverflowError",
    "CaptureClosedError",
    "ProcessOutputError",
]
