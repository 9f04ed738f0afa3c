"""Typed capture options for the raspivid/raspistill tools."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional

DEFAULT_BIT_RATE = 17_000_000
DEFAULT_FPS = 30
DEFAULT_STILL_DELAY_MS = 1


class Codec(str, Enum):
    H264 = "H264"
    MJPEG = "MJPEG"


class SensorMode(IntEnum):
    """Sensor readout mode (``--mode``); 0 lets the firmware choose.

    Camera v1.x (OV5647):

    | Mode | Size      | Aspect | Frame rates | FOV     | Binning       |
    |------|-----------|--------|-------------|---------|---------------|
    |    1 | 1920x1080 | 16:9   | 1-30fps     | Partial | None          |
    |    2 | 2592x1944 | 4:3    | 1-15fps     | Full    | None          |
    |    3 | 2592x1944 | 4:3    | 0.1666-1fps | Full    | None          |
    |    4 | 1296x972  | 4:3    | 1-42fps     | Full    | 2x2           |
    |    5 | 1296x730  | 16:9   | 1-49fps     | Full    | 2x2           |
    |    6 | 640x480   | 4:3    | 42.1-60fps  | Full    | 2x2 plus skip |
    |    7 | 640x480   | 4:3    | 60.1-90fps  | Full    | 2x2 plus skip |

    Camera v2.x (IMX219):

    | Mode | Size      | Aspect | Frame rates | FOV     | Binning |
    |------|-----------|--------|-------------|---------|---------|
    |    1 | 1920x1080 | 16:9   | 0.1-30fps   | Partial | None    |
    |    2 | 3280x2464 | 4:3    | 0.1-15fps   | Full    | None    |
    |    3 | 3280x2464 | 4:3    | 0.1-15fps   | Full    | None    |
    |    4 | 1640x1232 | 4:3    | 0.1-40fps   | Full    | 2x2     |
    |    5 | 1640x922  | 16:9   | 0.1-40fps   | Full    | 2x2     |
    |    6 | 1280x720  | 16:9   | 40-90fps    | Partial | 2x2     |
    |    7 | 640x480   | 4:3    | 40-90fps    | Partial | 2x2     |
    """

    AUTO_SELECT = 0
    MODE_1 = 1
    MODE_2 = 2
    MODE_3 = 3
    MODE_4 = 4
    MODE_5 = 5
    MODE_6 = 6
    MODE_7 = 7


class Rotation(IntEnum):
    ROTATE_0 = 0
    ROTATE_90 = 90
    ROTATE_180 = 180
    ROTATE_270 = 270


class Flip(str, Enum):
    NONE = "none"
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    BOTH = "both"


class ExposureMode(str, Enum):
    OFF = "off"
    AUTO = "auto"
    NIGHT = "night"
    NIGHT_PREVIEW = "nightpreview"
    BACKLIGHT = "backlight"
    SPOTLIGHT = "spotlight"
    SPORTS = "sports"
    SNOW = "snow"
    BEACH = "beach"
    VERY_LONG = "verylong"
    FIXED_FPS = "fixedfps"
    ANTI_SHAKE = "antishake"
    FIREWORKS = "fireworks"


class AwbMode(str, Enum):
    OFF = "off"
    AUTO = "auto"
    SUN = "sun"
    CLOUD = "cloud"
    SHADE = "shade"
    TUNGSTEN = "tungsten"
    FLUORESCENT = "fluorescent"
    INCANDESCENT = "incandescent"
    FLASH = "flash"
    HORIZON = "horizon"
    GREY_WORLD = "greyworld"


@dataclass(slots=True)
class ImageOptions:
    """Settings shared by video streams and still captures.

    ``None`` (and zero) leaves a setting to the firmware default.
    """

    width: Optional[int] = None
    height: Optional[int] = None
    rotation: Rotation = Rotation.ROTATE_0
    flip: Flip = Flip.NONE
    shutter: Optional[int] = None  # microseconds
    sharpness: Optional[int] = None  # -100..100
    contrast: Optional[int] = None  # -100..100
    brightness: Optional[int] = None  # 0..100
    saturation: Optional[int] = None  # -100..100
    iso: Optional[int] = None
    exposure_compensation: Optional[int] = None  # -10..10
    exposure_mode: Optional[ExposureMode] = None
    awb_mode: Optional[AwbMode] = None
    analog_gain: Optional[float] = None
    digital_gain: Optional[float] = None


@dataclass(slots=True)
class StreamOptions(ImageOptions):
    bit_rate: Optional[int] = DEFAULT_BIT_RATE
    fps: Optional[float] = DEFAULT_FPS
    codec: Codec = Codec.H264
    sensor_mode: SensorMode = SensorMode.AUTO_SELECT


@dataclass(slots=True)
class StillOptions(ImageOptions):
    delay: int = DEFAULT_STILL_DELAY_MS  # milliseconds before capture


__all__ = [
    "AwbMode",
    "Codec",
    "ExposureMode",
    "Flip",
    "ImageOptions",
    "Rotation",
    "SensorMode",
    "StillOptions",
    "StreamOptions",
]
