"""Raspberry Pi camera capture.

``StreamCamera`` wraps raspivid for continuous H264/MJPEG capture and
``StillCamera`` wraps raspistill for single images.
"""

from .config import (
    load_still_options,
    load_stream_options,
    still_options_from_config,
    stream_options_from_config,
)
from .demux import FrameDemultiplexer
from .fanout import ConsumerStream, StreamRegistry
from .options import (
    AwbMode,
    Codec,
    ExposureMode,
    Flip,
    Rotation,
    SensorMode,
    StillOptions,
    StreamOptions,
)
from .signature import (
    JPEG_SIGNATURE,
    FixedSignatureProvider,
    HostSignatureProvider,
    SignatureProvider,
)
from .still_camera import StillCamera
from .stream_camera import CameraEvent, CameraEventKind, CaptureState, StreamCamera

__all__ = [
    "AwbMode",
    "CameraEvent",
    "CameraEventKind",
    "CaptureState",
    "Codec",
    "ConsumerStream",
    "ExposureMode",
    "FixedSignatureProvider",
    "Flip",
    "FrameDemultiplexer",
    "HostSignatureProvider",
    "JPEG_SIGNATURE",
    "Rotation",
    "SensorMode",
    "SignatureProvider",
    "StillCamera",
    "StillOptions",
    "StreamCamera",
    "StreamOptions",
    "StreamRegistry",
    "load_still_options",
    "load_stream_options",
    "still_options_from_config",
    "stream_options_from_config",
]
