"""Launch external capture programs as asyncio subprocesses."""

from __future__ import annotations

import asyncio
from typing import Optional, Protocol, Sequence

from .errors import CaptureStartError, PipeUnavailableError, ProcessOutputError
from .logging_utils import LoggerLike, ensure_structured_logger


class Runner(Protocol):
    """What the cameras need from a process launcher."""

    async def spawn(
        self, command: str, args: Sequence[str]
    ) -> asyncio.subprocess.Process:
        ...

    async def run(self, command: str, args: Sequence[str]) -> bytes:
        ...


class ProcessRunner:
    """Spawns processes with piped stdout/stderr.

    Launch problems (missing executable, no permission) are raised as
    ``CaptureStartError`` so callers can tell them apart from a process that
    started but misbehaves later.
    """

    def __init__(self, *, logger: LoggerLike = None) -> None:
        self.logger = ensure_structured_logger(logger, fallback_name="ProcessRunner")

    async def spawn(
        self, command: str, args: Sequence[str]
    ) -> asyncio.subprocess.Process:
        argv = [command, *args]
        self.logger.debug("Command: %s", " ".join(argv))

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as exc:
            raise CaptureStartError(
                f"Could not start '{command}': executable not found. "
                f"Are you running on a Raspberry Pi with '{command}' installed?"
            ) from exc
        except PermissionError as exc:
            raise CaptureStartError(
                f"Could not start '{command}': permission denied"
            ) from exc
        except OSError as exc:
            raise CaptureStartError(f"Could not start '{command}': {exc}") from exc

        if process.stdout is None or process.stderr is None:
            missing = "stdout" if process.stdout is None else "stderr"
            _terminate_quietly(process)
            raise PipeUnavailableError(
                f"No '{missing}' available on spawned process '{command}'"
            )

        self.logger.info("Process '%s' started with PID: %d", command, process.pid)
        return process

    async def run(self, command: str, args: Sequence[str]) -> bytes:
        """Run ``command`` to completion and return everything it wrote to stdout.

        Any stderr output is treated as failure, mirroring how the raspi
        camera tools report problems while still exiting with status 0.
        """
        process = await self.spawn(command, args)
        stdout, stderr = await process.communicate()

        self.logger.debug(
            "Process '%s' exited with code %s (%d bytes stdout, %d bytes stderr)",
            command,
            process.returncode,
            len(stdout),
            len(stderr),
        )

        if stderr:
            raise ProcessOutputError(command, stderr)
        return stdout


def _terminate_quietly(process: asyncio.subprocess.Process) -> None:
    try:
        process.terminate()
    except ProcessLookupError:
        pass


async def run_process(
    command: str,
    args: Optional[Sequence[str]] = None,
    *,
    runner: Optional[Runner] = None,
) -> bytes:
    """Run ``command`` once and return its stdout (see ``ProcessRunner.run``)."""
    active = runner if runner is not None else ProcessRunner()
    return await active.run(command, list(args or ()))


__all__ = ["Runner", "ProcessRunner", "run_process"]
