"""Build camera options from ``key = value`` config files.

Example ``camera.txt``::

    # 720p MJPEG at 15 fps
    width = 1280
    height = 720
    fps = 15
    codec = MJPEG
    flip = horizontal
    awb_mode = tungsten
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

from rpi_camstream.core.config_manager import ConfigManager, get_config_manager

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


def _image_kwargs(config: Dict[str, str], cm: ConfigManager, defaults: Any) -> Dict[str, Any]:
    return {
        "width": cm.get_int(config, "width", defaults.width),
        "height": cm.get_int(config, "height", defaults.height),
        "rotation": cm.get_enum(config, "rotation", Rotation, defaults.rotation),
        "flip": cm.get_enum(config, "flip", Flip, defaults.flip),
        "shutter": cm.get_int(config, "shutter", defaults.shutter),
        "sharpness": cm.get_int(config, "sharpness", defaults.sharpness),
        "contrast": cm.get_int(config, "contrast", defaults.contrast),
        "brightness": cm.get_int(config, "brightness", defaults.brightness),
        "saturation": cm.get_int(config, "saturation", defaults.saturation),
        "iso": cm.get_int(config, "iso", defaults.iso),
        "exposure_compensation": cm.get_int(
            config, "exposure_compensation", defaults.exposure_compensation
        ),
        "exposure_mode": cm.get_enum(config, "exposure_mode", ExposureMode, defaults.exposure_mode),
        "awb_mode": cm.get_enum(config, "awb_mode", AwbMode, defaults.awb_mode),
        "analog_gain": cm.get_float(config, "analog_gain", defaults.analog_gain),
        "digital_gain": cm.get_float(config, "digital_gain", defaults.digital_gain),
    }


def stream_options_from_config(
    config: Dict[str, str],
    *,
    config_manager: Optional[ConfigManager] = None,
) -> StreamOptions:
    cm = config_manager or get_config_manager()
    defaults = StreamOptions()
    return StreamOptions(
        **_image_kwargs(config, cm, defaults),
        bit_rate=cm.get_int(config, "bit_rate", defaults.bit_rate),
        fps=cm.get_float(config, "fps", defaults.fps),
        codec=cm.get_enum(config, "codec", Codec, defaults.codec),
        sensor_mode=cm.get_enum(config, "sensor_mode", SensorMode, defaults.sensor_mode),
    )


def still_options_from_config(
    config: Dict[str, str],
    *,
    config_manager: Optional[ConfigManager] = None,
) -> StillOptions:
    cm = config_manager or get_config_manager()
    defaults = StillOptions()
    return StillOptions(
        **_image_kwargs(config, cm, defaults),
        delay=cm.get_int(config, "delay", defaults.delay),
    )


async def load_stream_options(config_path: Path) -> StreamOptions:
    cm = get_config_manager()
    config = await cm.read_config_async(Path(config_path))
    return stream_options_from_config(config, config_manager=cm)


async def load_still_options(config_path: Path) -> StillOptions:
    cm = get_config_manager()
    config = await cm.read_config_async(Path(config_path))
    return still_options_from_config(config, config_manager=cm)


__all__ = [
    "load_still_options",
    "load_stream_options",
    "still_options_from_config",
    "stream_options_from_config",
]
