"""Top-level package for rpi_camstream."""

from __future__ import annotations

from importlib import metadata

from .camera import (
    AwbMode,
    CameraEvent,
    CameraEventKind,
    CaptureState,
    Codec,
    ConsumerStream,
    ExposureMode,
    Flip,
    Rotation,
    SensorMode,
    StillCamera,
    StillOptions,
    StreamCamera,
    StreamOptions,
)
from .core.errors import (
    CameraError,
    CaptureAlreadyRunningError,
    CaptureClosedError,
    CaptureStartError,
    CaptureStreamError,
    CodecMismatchError,
    SignatureResolutionError,
)
from .core.logging_config import configure_logging

try:
    __version__ = metadata.version("rpi-camstream")
except metadata.PackageNotFoundError:  # pragma: no cover - local dev
    __version__ = "0.0.0"


__all__ = [
    "__version__",
    "AwbMode",
    "CameraError",
    "CameraEvent",
    "CameraEventKind",
    "CaptureAlreadyRunningError",
    "CaptureClosedError",
    "CaptureStartError",
    "CaptureState",
    "CaptureStreamError",
    "Codec",
    "CodecMismatchError",
    "ConsumerStream",
    "ExposureMode",
    "Flip",
    "Rotation",
    "SensorMode",
    "SignatureResolutionError",
    "StillCamera",
    "StillOptions",
    "StreamCamera",
    "StreamOptions",
    "configure_logging",
]
