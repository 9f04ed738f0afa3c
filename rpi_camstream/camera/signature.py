"""JPEG start signatures used to split MJPEG output into frames."""

from __future__ import annotations

import asyncio
from typing import Callable, FrozenSet, Optional, Protocol

from rpi_camstream.core.errors import SignatureResolutionError
from rpi_camstream.core.logging_utils import get_module_logger
from rpi_camstream.core.platform_info import DOCKER_MODEL, PlatformInfo, get_platform_info

logger = get_module_logger("Signature")

# SOI marker followed by the quantisation table header the GPU encoder writes
JPEG_SIGNATURE = bytes([0xFF, 0xD8, 0xFF, 0xDB, 0x00, 0x84, 0x00])

SUPPORTED_MODELS: FrozenSet[str] = frozenset({
    "BCM2711",
    "BCM2835 - Pi 3 Model B",
    "BCM2835 - Pi 3 Model B+",
    "BCM2835 - Pi 4 Model B",
    "BCM2835 - Pi Zero",
    "BCM2835 - Pi Zero W",
    DOCKER_MODEL,
})


def signature_for_model(model: Optional[str]) -> bytes:
    """Return the JPEG start signature for a host ``model`` string."""
    if model in SUPPORTED_MODELS:
        return JPEG_SIGNATURE
    raise SignatureResolutionError(model)


class SignatureProvider(Protocol):
    async def resolve(self) -> bytes:
        ...


class HostSignatureProvider:
    """Picks the signature from the detected host model."""

    def __init__(self, platform_source: Callable[[], PlatformInfo] = get_platform_info) -> None:
        self._platform_source = platform_source

    async def resolve(self) -> bytes:
        info = await asyncio.to_thread(self._platform_source)
        model = info.system_model
        signature = signature_for_model(model)
        logger.debug("Using JPEG signature %s for model '%s'", signature.hex(" "), model)
        return signature


class FixedSignatureProvider:
    """Always returns the same signature; useful off-device and in tests."""

    def __init__(self, signature: bytes = JPEG_SIGNATURE) -> None:
        if not signature:
            raise ValueError("signature must not be empty")
        self._signature = bytes(signature)

    @property
    def signature(self) -> bytes:
        return self._signature

    async def resolve(self) -> bytes:
        return self._signature


__all__ = [
    "JPEG_SIGNATURE",
    "SUPPORTED_MODELS",
    "FixedSignatureProvider",
    "HostSignatureProvider",
    "SignatureProvider",
    "signature_for_model",
]
