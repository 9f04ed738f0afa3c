"""Single-image capture with ``raspistill``."""

from __future__ import annotations

import dataclasses
from typing import Optional

from rpi_camstream.core.logging_utils import LoggerLike, ensure_structured_logger
from rpi_camstream.core.process_runner import ProcessRunner, Runner

from .args import STILL_COMMAND, build_still_args
from .options import StillOptions


class StillCamera:
    """Runs raspistill once per image and returns the encoded bytes."""

    def __init__(
        self,
        options: Optional[StillOptions] = None,
        *,
        runner: Optional[Runner] = None,
        logger: LoggerLike = None,
    ) -> None:
        self._options = dataclasses.replace(options) if options is not None else StillOptions()
        self.logger = ensure_structured_logger(logger, fallback_name="StillCamera")
        self._runner = runner or ProcessRunner(logger=self.logger.getChild("runner"))

    @property
    def options(self) -> StillOptions:
        return dataclasses.replace(self._options)

    async def take_image(self) -> bytes:
        """Capture one image.

        Raises:
            CaptureStartError: raspistill could not be launched.
            ProcessOutputError: raspistill reported an error on stderr.
        """
        args = build_still_args(self._options)
        self.logger.debug("Capturing still image (delay=%dms)", self._options.delay)
        image = await self._runner.run(STILL_COMMAND, args)
        self.logger.info("Captured still image (%d bytes)", len(image))
        return image


__all__ = ["StillCamera"]
