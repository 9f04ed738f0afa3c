"""Continuous capture from ``raspivid``.

``StreamCamera`` supervises one raspivid process at a time. Every chunk the
process writes to stdout is copied to each registered consumer stream and, in
MJPEG mode, fed to a ``FrameDemultiplexer`` whose frames are delivered to
``take_image()`` waiters, ``frames()`` iterators and observers, in that order.

Errors that happen while a session is live do not stop it. They are logged,
delivered to observers as ``ERROR`` events, and the owner decides whether to
call ``stop()``.
"""

from __future__ import annotations

import asyncio
import contextlib
import dataclasses
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import AsyncIterator, Awaitable, Callable, Dict, List, Optional, Set

from rpi_camstream.core.asyncio_utils import cancel_and_wait, create_logged_task
from rpi_camstream.core.errors import (
    CaptureAlreadyRunningError,
    CaptureClosedError,
    CaptureStartError,
    CaptureStreamError,
    CodecMismatchError,
    FrameBufferOverflowError,
)
from rpi_camstream.core.logging_utils import LoggerLike, ensure_structured_logger
from rpi_camstream.core.process_runner import ProcessRunner, Runner

from .args import STREAM_COMMAND, build_stream_args
from .demux import DEFAULT_MAX_BUFFER_BYTES, FrameDemultiplexer
from .fanout import ConsumerStream, StreamRegistry
from .options import Codec, StreamOptions
from .signature import HostSignatureProvider, SignatureProvider

DEFAULT_READ_SIZE = 64 * 1024
STDERR_TAIL_BYTES = 4096
STDERR_GRACE_SECONDS = 0.5
STOPPED_WHILE_STARTING = "Capture was stopped before it produced output"


class CaptureState(Enum):
    IDLE = "idle"
    STARTING = "starting"
    CAPTURING = "capturing"
    FAILED = "failed"
    STOPPED = "stopped"


class CameraEventKind(Enum):
    FRAME = "frame"
    ERROR = "error"
    CLOSE = "close"


@dataclass
class CameraEvent:
    kind: CameraEventKind
    frame: Optional[bytes] = None
    error: Optional[BaseException] = None
    timestamp: float = field(default_factory=time.time)


CameraObserver = Callable[[CameraEvent], Awaitable[None]]


@dataclass(eq=False)
class _CaptureSession:
    process: asyncio.subprocess.Process
    demux: Optional[FrameDemultiplexer]
    first_chunk: "asyncio.Future[None]"
    tasks: Set[asyncio.Task] = field(default_factory=set)
    stderr_task: Optional[asyncio.Task] = None
    stderr_tail: bytes = b""
    stopping: bool = False
    closed: bool = False


class StreamCamera:
    """Supervises raspivid and hands its output to streams, frame waiters and observers.

    One session runs at a time; after ``stop()`` the camera can be started
    again. Options are copied on construction and fixed for its lifetime.
    """

    def __init__(
        self,
        options: Optional[StreamOptions] = None,
        *,
        signature_provider: Optional[SignatureProvider] = None,
        runner: Optional[Runner] = None,
        logger: LoggerLike = None,
        read_size: int = DEFAULT_READ_SIZE,
        max_buffer_bytes: Optional[int] = DEFAULT_MAX_BUFFER_BYTES,
    ):
        if read_size <= 0:
            raise ValueError("read_size must be positive")

        self._options = dataclasses.replace(options) if options is not None else StreamOptions()
        self.logger = ensure_structured_logger(logger, fallback_name="StreamCamera")
        self._signature_provider = signature_provider or HostSignatureProvider()
        self._runner = runner or ProcessRunner(logger=self.logger.getChild("runner"))
        self._read_size = read_size
        self._max_buffer_bytes = max_buffer_bytes

        self._streams = StreamRegistry(logger=self.logger.getChild("streams"))
        self._session: Optional[_CaptureSession] = None
        self._state = CaptureState.IDLE
        self._last_error: Optional[BaseException] = None
        self._starting = False
        self._stop_requested = False

        self._observers: List[CameraObserver] = []
        self._event_filters: Dict[CameraObserver, Optional[Set[CameraEventKind]]] = {}
        self._image_waiters: List["asyncio.Future[bytes]"] = []
        self._frame_queues: List["asyncio.Queue[Optional[bytes]]"] = []

    # ------------------------------------------------------------------
    # Properties

    @property
    def options(self) -> StreamOptions:
        return dataclasses.replace(self._options)

    @property
    def state(self) -> CaptureState:
        return self._state

    @property
    def is_capturing(self) -> bool:
        return self._state is CaptureState.CAPTURING

    @property
    def pid(self) -> Optional[int]:
        return self._session.process.pid if self._session else None

    @property
    def last_error(self) -> Optional[BaseException]:
        return self._last_error

    @property
    def stream_count(self) -> int:
        return len(self._streams)

    # ------------------------------------------------------------------
    # Lifecycle

    async def start(self, timeout: Optional[float] = None) -> None:
        """Launch raspivid and return once it has produced its first output.

        Raises:
            CaptureAlreadyRunningError: a session is already active.
            SignatureResolutionError: MJPEG requested on an unknown host.
            CaptureStartError: launch failed, the process exited without
                output, or ``timeout`` seconds passed without output.
        """
        if self._session is not None or self._starting:
            raise CaptureAlreadyRunningError(
                "Capture already running; call stop() before starting again"
            )

        previous_state = self._state
        self._state = CaptureState.STARTING
        self._starting = True
        self._stop_requested = False
        self.logger.info("Starting capture (codec=%s)", self._options.codec.value)

        try:
            signature = None
            if self._options.codec is Codec.MJPEG:
                signature = await self._signature_provider.resolve()
            if self._stop_requested:
                raise CaptureStartError(STOPPED_WHILE_STARTING)
            process = await self._runner.spawn(STREAM_COMMAND, build_stream_args(self._options))
        except BaseException:
            # stop() already moved the state to STOPPED
            if not self._stop_requested:
                self._state = previous_state
            raise
        finally:
            self._starting = False

        if self._stop_requested:
            self._terminate(process)
            raise CaptureStartError(STOPPED_WHILE_STARTING)

        demux = None
        if signature is not None:
            demux = FrameDemultiplexer(signature, max_buffer_bytes=self._max_buffer_bytes)

        session = _CaptureSession(
            process=process,
            demux=demux,
            first_chunk=asyncio.get_running_loop().create_future(),
        )
        self._session = session
        self._spawn_task(session, self._read_stdout(session), "stdout")
        session.stderr_task = self._spawn_task(session, self._read_stderr(session), "stderr")
        self._spawn_task(session, self._monitor_process(session), "monitor")

        try:
            await asyncio.wait_for(session.first_chunk, timeout=timeout)
        except asyncio.TimeoutError:
            await self._abort_start(session, previous_state)
            raise CaptureStartError(
                f"No output from '{STREAM_COMMAND}' within {timeout:.1f}s"
            ) from None
        except BaseException:
            await self._abort_start(session, previous_state)
            raise

        if self._session is session and self._state is CaptureState.STARTING:
            self._state = CaptureState.CAPTURING
        self.logger.info("Capture running (PID %d)", process.pid)

    async def stop(self, timeout: Optional[float] = None) -> None:
        """Stop capturing and end every consumer stream.

        By default the process is only sent SIGTERM. With ``timeout`` the call
        waits that long for it to exit and then kills it.
        """
        session = self._session
        if session is None:
            if self._starting:
                self.logger.info("Stop requested while capture is starting")
                self._stop_requested = True
                self._state = CaptureState.STOPPED
            self._streams.close_all()
            self._end_frame_consumers()
            return

        self.logger.info("Stopping capture (PID %d)", session.process.pid)
        session.stopping = True
        self._session = None

        self._terminate(session.process)
        self._streams.close_all()

        if not session.first_chunk.done():
            session.first_chunk.set_exception(CaptureStartError(STOPPED_WHILE_STARTING))

        try:
            if timeout is not None:
                await self._wait_for_exit(session.process, timeout)
        finally:
            for task in tuple(session.tasks):
                await cancel_and_wait(task)
            await self._finish_output(session)
            self._state = CaptureState.STOPPED
            self.logger.info("Capture stopped")

    async def _abort_start(self, session: _CaptureSession, previous_state: CaptureState) -> None:
        session.stopping = True
        if self._session is session:
            self._session = None
            self._state = previous_state
        self._terminate(session.process)
        for task in tuple(session.tasks):
            await cancel_and_wait(task)
        self.logger.warning("Capture start aborted")

    def _terminate(self, process: asyncio.subprocess.Process) -> None:
        if process.returncode is not None:
            return
        with contextlib.suppress(ProcessLookupError):
            process.terminate()

    async def _wait_for_exit(self, process: asyncio.subprocess.Process, timeout: float) -> None:
        try:
            await asyncio.wait_for(process.wait(), timeout=timeout)
            self.logger.debug("Process exited with code %s", process.returncode)
        except asyncio.TimeoutError:
            self.logger.warning("Process did not exit within %.1fs, killing...", timeout)
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()

    def _spawn_task(self, session: _CaptureSession, coro: Awaitable[None], label: str) -> asyncio.Task:
        return create_logged_task(
            coro,
            logger=self.logger,
            context=f"{STREAM_COMMAND}-{label}",
            pending=session.tasks,
        )

    # ------------------------------------------------------------------
    # Consumers

    def register(self, name: Optional[str] = None) -> ConsumerStream:
        """Create a stream that receives every raw chunk from now on."""
        return self._streams.register(name)

    def unregister(self, stream: ConsumerStream) -> bool:
        return self._streams.unregister(stream)

    def take_image(self) -> "asyncio.Future[bytes]":
        """Return a future for the next frame emitted after this call.

        Raises:
            CodecMismatchError: immediately, unless the codec is MJPEG.
        """
        self._require_mjpeg("take an image")
        future: "asyncio.Future[bytes]" = asyncio.get_running_loop().create_future()
        self._image_waiters.append(future)
        return future

    def frames(self) -> AsyncIterator[bytes]:
        """Iterate frames emitted from now until the session closes."""
        self._require_mjpeg("iterate frames")
        queue: "asyncio.Queue[Optional[bytes]]" = asyncio.Queue()
        self._frame_queues.append(queue)
        return self._iterate_frames(queue)

    async def _iterate_frames(self, queue: "asyncio.Queue[Optional[bytes]]") -> AsyncIterator[bytes]:
        try:
            while True:
                frame = await queue.get()
                if frame is None:
                    return
                yield frame
        finally:
            with contextlib.suppress(ValueError):
                self._frame_queues.remove(queue)

    def _require_mjpeg(self, action: str) -> None:
        if self._options.codec is not Codec.MJPEG:
            raise CodecMismatchError(
                f"Codec must be '{Codec.MJPEG.value}' to {action} "
                f"(configured: '{self._options.codec.value}')"
            )

    # ------------------------------------------------------------------
    # Observers

    def add_observer(
        self,
        observer: CameraObserver,
        *,
        events: Optional[Set[CameraEventKind]] = None,
    ) -> None:
        """Register an async callback for camera events.

        Args:
            observer: Async callback receiving a ``CameraEvent``.
            events: Optional set of event kinds to filter. If None, receives all.
        """
        if observer not in self._observers:
            self._observers.append(observer)
            self._event_filters[observer] = events

    def remove_observer(self, observer: CameraObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)
            self._event_filters.pop(observer, None)

    async def _notify(self, event: CameraEvent) -> None:
        for observer in tuple(self._observers):
            event_filter = self._event_filters.get(observer)
            if event_filter is not None and event.kind not in event_filter:
                continue

            try:
                await observer(event)
            except Exception as e:
                self.logger.error(
                    "Observer %s error handling %s: %s",
                    getattr(observer, "__name__", repr(observer)),
                    event.kind.value,
                    e,
                    exc_info=True,
                )

    # ------------------------------------------------------------------
    # Output handling

    async def _read_stdout(self, session: _CaptureSession) -> None:
        stdout = session.process.stdout
        try:
            while True:
                chunk = await stdout.read(self._read_size)
                if not chunk:
                    break
                await self._handle_chunk(session, chunk)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            if not session.first_chunk.done():
                session.first_chunk.set_exception(
                    CaptureStartError(f"Could not read '{STREAM_COMMAND}' output: {exc}")
                )
                return
            error = CaptureStreamError(f"Error reading '{STREAM_COMMAND}' output: {exc}")
            error.__cause__ = exc
            await self._report_error(session, error, fatal=True)
            await self._finish_output(session)
            return

        if not session.first_chunk.done():
            await self._fail_start_on_eof(session)
            return

        self.logger.debug("'%s' output reached end of stream", STREAM_COMMAND)
        await self._finish_output(session)

    async def _fail_start_on_eof(self, session: _CaptureSession) -> None:
        if session.stderr_task is not None and not session.stderr_task.done():
            await asyncio.wait({session.stderr_task}, timeout=STDERR_GRACE_SECONDS)

        message = f"'{STREAM_COMMAND}' exited before producing any output"
        detail = session.stderr_tail.decode(errors="replace").strip()
        if detail:
            message = f"{message}: {detail}"
        if not session.first_chunk.done():
            session.first_chunk.set_exception(CaptureStartError(message))

    async def _handle_chunk(self, session: _CaptureSession, chunk: bytes) -> None:
        if session is not self._session:
            return

        self._streams.dispatch(chunk)

        if not session.first_chunk.done():
            self.logger.debug("First output received (%d bytes)", len(chunk))
            session.first_chunk.set_result(None)

        if session.demux is None:
            return

        try:
            for frame in session.demux.feed(chunk):
                await self._emit_frame(frame)
                if session is not self._session:
                    break
        except FrameBufferOverflowError as exc:
            await self._report_error(session, exc)

    async def _emit_frame(self, frame: bytes) -> None:
        waiters, self._image_waiters = self._image_waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(frame)

        for queue in tuple(self._frame_queues):
            queue.put_nowait(frame)

        await self._notify(CameraEvent(CameraEventKind.FRAME, frame=frame))

    async def _read_stderr(self, session: _CaptureSession) -> None:
        stderr = session.process.stderr
        try:
            while True:
                data = await stderr.read(self._read_size)
                if not data:
                    break
                session.stderr_tail = (session.stderr_tail + data)[-STDERR_TAIL_BYTES:]
                text = data.decode(errors="replace").strip()
                if text:
                    await self._report_error(session, CaptureStreamError(text))
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            error = CaptureStreamError(f"Error reading '{STREAM_COMMAND}' stderr: {exc}")
            error.__cause__ = exc
            await self._report_error(session, error, fatal=True)

    async def _monitor_process(self, session: _CaptureSession) -> None:
        returncode = await session.process.wait()

        if session.stopping or session is not self._session:
            self.logger.debug("Process exited with code %s after stop", returncode)
            return
        if not session.first_chunk.done():
            # Reported through start() instead
            return

        if returncode == 0:
            self.logger.info("Process exited normally")
        else:
            await self._report_error(
                session,
                CaptureStreamError(f"'{STREAM_COMMAND}' exited with code {returncode}"),
                fatal=True,
            )

    async def _report_error(
        self,
        session: _CaptureSession,
        error: BaseException,
        *,
        fatal: bool = False,
    ) -> None:
        if session is not self._session or session.stopping:
            return

        self._last_error = error
        if fatal and self._state in (CaptureState.STARTING, CaptureState.CAPTURING):
            self._state = CaptureState.FAILED
        self.logger.error("Capture error: %s", error)
        await self._notify(CameraEvent(CameraEventKind.ERROR, error=error))

    async def _finish_output(self, session: _CaptureSession) -> None:
        if session.closed:
            return
        session.closed = True
        self._end_frame_consumers()
        await self._notify(CameraEvent(CameraEventKind.CLOSE))

    def _end_frame_consumers(self) -> None:
        waiters, self._image_waiters = self._image_waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_exception(CaptureClosedError("Capture closed before a frame arrived"))

        queues, self._frame_queues = self._frame_queues, []
        for queue in queues:
            queue.put_nowait(None)


__all__ = [
    "CameraEvent",
    "CameraEventKind",
    "CameraObserver",
    "CaptureState",
    "StreamCamera",
]
