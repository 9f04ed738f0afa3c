"""
Host detection for rpi_camstream.

Detection runs once and is cached. The ``system_model`` string follows the
"<SoC> - <board>" convention used to pick a JPEG start signature, e.g.
``"BCM2835 - Pi 3 Model B"``, ``"BCM2711"`` or ``"Docker Container"``.
"""

from __future__ import annotations

import platform
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from rpi_camstream.core.logging_utils import get_module_logger

logger = get_module_logger("PlatformInfo")

DOCKER_MODEL = "Docker Container"

MODEL_PATHS = (
    Path("/proc/device-tree/model"),
    Path("/sys/firmware/devicetree/base/model"),
)
CPUINFO_PATH = Path("/proc/cpuinfo")
CONTAINER_MARKERS = (Path("/.dockerenv"), Path("/run/.containerenv"))
CGROUP_PATH = Path("/proc/1/cgroup")

_REVISION_SUFFIX = re.compile(r"\s+Rev\s+[\w.]+$", re.IGNORECASE)


@dataclass(frozen=True)
class PlatformInfo:
    """Immutable host information detected at first use.

    Attributes:
        platform: System platform ('linux', 'darwin', 'win32')
        architecture: CPU architecture ('aarch64', 'armv7l', 'x86_64')
        hardware: SoC name from /proc/cpuinfo (e.g. 'BCM2835'), if any
        pi_model: Device tree model string (e.g. 'Raspberry Pi 4 Model B Rev 1.4')
        in_container: True when running inside Docker/Podman
    """

    platform: str
    architecture: str
    hardware: Optional[str]
    pi_model: Optional[str]
    in_container: bool

    @property
    def is_raspberry_pi(self) -> bool:
        return bool(self.pi_model) and "raspberry pi" in self.pi_model.lower()

    @property
    def board(self) -> Optional[str]:
        """Board name without vendor prefix or revision, e.g. 'Pi 3 Model B+'."""
        if not self.pi_model:
            return None
        board = _REVISION_SUFFIX.sub("", self.pi_model.strip())
        if board.lower().startswith("raspberry "):
            board = board[len("raspberry "):]
        return board

    @property
    def system_model(self) -> Optional[str]:
        if self.in_container:
            return DOCKER_MODEL
        if self.hardware == "BCM2711":
            return self.hardware
        if self.hardware and self.board:
            return f"{self.hardware} - {self.board}"
        return self.hardware or self.pi_model

    def __str__(self) -> str:
        model = self.system_model
        if model:
            return f"{model} ({self.architecture})"
        return f"{self.platform} ({self.architecture})"


def _read_first(paths: Iterable[Path]) -> Optional[str]:
    for path in paths:
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError:
            continue
        text = text.strip().rstrip("\x00").strip()
        if text:
            return text
    return None


def _parse_cpuinfo_hardware(cpuinfo: str) -> Optional[str]:
    for line in cpuinfo.splitlines():
        key, sep, value = line.partition(":")
        if sep and key.strip().lower() == "hardware":
            return value.strip() or None
    return None


def _detect_container() -> bool:
    if any(marker.exists() for marker in CONTAINER_MARKERS):
        return True
    cgroup = _read_first([CGROUP_PATH]) or ""
    return "docker" in cgroup or "containerd" in cgroup


def detect_platform() -> PlatformInfo:
    """Probe the host. Use ``get_platform_info()`` for the cached instance."""
    hardware = None
    pi_model = None
    in_container = False

    if sys.platform.startswith("linux"):
        pi_model = _read_first(MODEL_PATHS)
        cpuinfo = _read_first([CPUINFO_PATH])
        if cpuinfo:
            hardware = _parse_cpuinfo_hardware(cpuinfo)
        in_container = _detect_container()

    info = PlatformInfo(
        platform=sys.platform,
        architecture=platform.machine(),
        hardware=hardware,
        pi_model=pi_model,
        in_container=in_container,
    )
    logger.info("Platform detected: %s", info)
    return info


_platform_info: Optional[PlatformInfo] = None


def get_platform_info() -> PlatformInfo:
    global _platform_info
    if _platform_info is None:
        _platform_info = detect_platform()
    return _platform_info


def reset_platform_info() -> None:
    """Reset the cached platform info (for testing only)."""
    global _platform_info
    _platform_info = None


__all__ = [
    "DOCKER_MODEL",
    "PlatformInfo",
    "detect_platform",
    "get_platform_info",
    "reset_platform_info",
]
