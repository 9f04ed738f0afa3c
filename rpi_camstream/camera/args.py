"""Command-line arguments for ``raspivid`` and ``raspistill``.

Settings that are unset or zero are left out so the tools apply their own
defaults.
"""

from __future__ import annotations

from typing import List, Optional, Union

from .options import Flip, ImageOptions, SensorMode, StillOptions, StreamOptions

STREAM_COMMAND = "raspivid"
STILL_COMMAND = "raspistill"

Number = Union[int, float]


def _format_number(value: Number) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _option(flag: str, value: Optional[Number]) -> List[str]:
    if not value:
        return []
    return [flag, _format_number(value)]


def build_shared_args(options: ImageOptions) -> List[str]:
    """Arguments understood by both raspivid and raspistill."""
    args: List[str] = []
    args += _option("--width", options.width)
    args += _option("--height", options.height)
    args += _option("--rotation", int(options.rotation))

    if options.flip in (Flip.HORIZONTAL, Flip.BOTH):
        args.append("--hflip")
    if options.flip in (Flip.VERTICAL, Flip.BOTH):
        args.append("--vflip")

    args += _option("--shutter", options.shutter)
    args += _option("--sharpness", options.sharpness)
    args += _option("--contrast", options.contrast)
    args += _option("--brightness", options.brightness)
    args += _option("--saturation", options.saturation)
    args += _option("--ISO", options.iso)
    args += _option("--ev", options.exposure_compensation)

    if options.exposure_mode:
        args += ["--exposure", options.exposure_mode.value]
    if options.awb_mode:
        args += ["--awb", options.awb_mode.value]

    args += _option("--analoggain", options.analog_gain)
    args += _option("--digitalgain", options.digital_gain)
    return args


def build_stream_args(options: StreamOptions) -> List[str]:
    args = build_shared_args(options)
    args += _option("--bitrate", options.bit_rate)
    args += _option("--framerate", options.fps)
    args += ["--codec", options.codec.value]

    if options.sensor_mode != SensorMode.AUTO_SELECT:
        args += ["--mode", str(int(options.sensor_mode))]

    # Capture forever, no on-screen preview, write to stdout
    args += ["--timeout", "0", "--nopreview", "--output", "-"]
    return args


def build_still_args(options: StillOptions) -> List[str]:
    args = build_shared_args(options)
    args += ["--timeout", str(max(int(options.delay), 1))]
    args += ["--nopreview", "--output", "-"]
    return args


__all__ = [
    "STILL_COMMAND",
    "STREAM_COMMAND",
    "build_shared_args",
    "build_still_args",
    "build_stream_args",
]
