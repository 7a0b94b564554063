"""
Log Buffer - Log collection, crash reports and periodic upload

Responsible for:
- Buffering log lines and error reports in memory
- Appending new records to a local file (only the delta since the last write)
- Handing the file to an upload callback at startup and then periodically,
  only when it changed since the last upload

Architecture:
    collect_log / report_error → IN-MEMORY BUFFER
           ↓ (each call, unless debug mode)
    LOCAL FILE (append only the records not yet written)
           ↓ (every minutes_wait, only if the file changed)
    upload_file(path)

In debug mode records are printed to the console instead; nothing is
written or uploaded.
"""

import asyncio
import inspect
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable

from errorlog.common.config import (
    DEFAULT_FILE_NAME,
    ErrorLogSettings,
    validate_minutes_wait,
)
from errorlog.common.exceptions import ConfigError, FileSinkError, UploadError
from errorlog.common.logging_setup import get_service_logger
from errorlog.common.scheduler import ScheduledLoop

from .error_source import ErrorHooks, ReportZone, run_protected
from .local_file import LocalLogFile
from .records import ErrorDetails, Label, LogRecord

logger = get_service_logger("log_buffer")

UploadFile = Callable[[Path], Awaitable[Any]]

STARTUP_MESSAGE = "Application started successfully."

# minutes_wait is in minutes; the timer runs in seconds
SECONDS_PER_MINUTE = 60


def _print_console(line: str) -> None:
    try:
        print(line)
    except UnicodeEncodeError:
        # Console encoding can't take it (e.g. lone surrogates); print escaped
        print(line.encode("utf-8", "backslashreplace").decode("utf-8"))


class BufferState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"  # log file could not be resolved; records stay in memory
    STOPPED = "stopped"


class LogBuffer:
    """
    In-process log and crash-report buffer.

    Construct once from the host's startup sequence (inside a running event
    loop) and pass the instance to whatever needs to log:

        log = LogBuffer(
            report_zone=start_app,
            debug_mode=False,
            upload_file=send_log,
            minutes_wait=30,
        )
        log.info("hello")

    Construction never blocks; initialization runs as a background task.

    Invariants:
    - 0 <= flushed <= len(buffer); flushed only moves forward, and only
      after the records up to it were appended to the file
    - the dirty flag is set after every write and cleared only by a
      successful periodic upload that saw no write while in flight
    """

    def __init__(
        self,
        report_zone: ReportZone,
        debug_mode: bool,
        upload_file: UploadFile,
        minutes_wait: int,
        file_name: str = DEFAULT_FILE_NAME,
        log_dir: str | Path | None = None,
    ):
        if not callable(report_zone):
            raise ConfigError("report_zone must be callable")
        if not callable(upload_file):
            raise ConfigError("upload_file must be callable")
        validate_minutes_wait(minutes_wait)

        self._settings = ErrorLogSettings(
            debug_mode=debug_mode,
            minutes_wait=minutes_wait,
            file_name=file_name,
            log_dir=str(log_dir) if log_dir is not None else None,
        )
        self._settings.validate()

        self._report_zone = report_zone
        self._upload_file = upload_file

        self._state = BufferState.UNINITIALIZED
        self._reset()

        self._local_file: LocalLogFile | None = None
        self._file_ready = asyncio.Event()
        self._write_lock = asyncio.Lock()
        self._hooks = ErrorHooks(self.report_error)

        # Strong references to fire-and-forget tasks
        self._pending_writes: set[asyncio.Task] = set()
        self._zone_task: asyncio.Task | None = None
        self._startup_upload_task: asyncio.Task | None = None
        self._upload_scheduler: ScheduledLoop | None = None

        # Observability
        self._write_count = 0
        self._write_error_count = 0
        self._upload_count = 0
        self._upload_error_count = 0

        self._init_error: FileSinkError | None = None

        self._init_task = asyncio.get_running_loop().create_task(
            self._initialize(), name="log-buffer-init"
        )

    @classmethod
    def from_settings(
        cls,
        settings: ErrorLogSettings,
        report_zone: ReportZone,
        upload_file: UploadFile,
    ) -> "LogBuffer":
        return cls(
            report_zone=report_zone,
            debug_mode=settings.debug_mode,
            upload_file=upload_file,
            minutes_wait=settings.minutes_wait,
            file_name=settings.file_name,
            log_dir=settings.log_dir,
        )

    def _reset(self) -> None:
        self._buffer: list[str] = []
        self._flushed = 0
        self._file_changed = False
        self._write_generation = 0

    # ---------------------------------------------------------------------
    # Properties
    # ---------------------------------------------------------------------

    @property
    def debug_mode(self) -> bool:
        return self._settings.debug_mode

    @property
    def minutes_wait(self) -> int:
        return self._settings.minutes_wait

    @property
    def file_name(self) -> str:
        return self._settings.file_name

    @property
    def log_file(self) -> Path | None:
        """Path of the log file, None until initialization resolves it."""
        return self._local_file.path if self._local_file else None

    @property
    def state(self) -> BufferState:
        return self._state

    @property
    def length(self) -> int:
        return len(self._buffer)

    @property
    def flushed(self) -> int:
        return self._flushed

    @property
    def file_changed(self) -> bool:
        return self._file_changed

    @property
    def records(self) -> list[str]:
        """Copy of the formatted records collected so far."""
        return list(self._buffer)

    # ---------------------------------------------------------------------
    # Lifecycle
    # ---------------------------------------------------------------------

    async def _initialize(self) -> None:
        self._state = BufferState.INITIALIZING

        self._hooks.install()
        self._zone_task = run_protected(self._report_zone, self.report_error)

        try:
            self._local_file = await LocalLogFile.resolve(
                self._settings.file_name,
                self._settings.resolve_log_dir(),
            )
        except FileSinkError as e:
            self._init_error = e
            self._state = BufferState.FAILED
            logger.error(f"Log file could not be resolved, records stay in memory: {e}")
            # Wake writes already waiting; they find no file and return
            self._file_ready.set()
            return
        self._file_ready.set()

        self.info(STARTUP_MESSAGE)

        if not self.debug_mode:
            self._startup_upload_task = asyncio.create_task(
                self._startup_upload(), name="log-buffer-startup-upload"
            )

        self._upload_scheduler = ScheduledLoop(
            self._settings.minutes_wait * SECONDS_PER_MINUTE,
            self.upload_if_changed,
            name="upload",
        )
        await self._upload_scheduler.start()

        self._state = BufferState.READY
        logger.info(
            f"Log buffer ready (file: {self._local_file.path}, "
            f"upload every {self._settings.minutes_wait} min, debug={self.debug_mode})"
        )

    async def wait_ready(self) -> None:
        """Wait for initialization; raises FileSinkError if the file could not be resolved."""
        await asyncio.shield(self._init_task)
        if self._init_error is not None:
            raise self._init_error

    async def drain(self) -> None:
        """Wait until every scheduled write has finished."""
        while self._pending_writes:
            await asyncio.gather(*list(self._pending_writes), return_exceptions=True)

    async def stop(self) -> None:
        """
        Stop the upload timer, finish pending writes and remove error hooks.

        The in-memory buffer and the file are left as they are.
        """
        if self._state == BufferState.STOPPED:
            return

        if not self._init_task.done():
            self._init_task.cancel()
            try:
                await self._init_task
            except asyncio.CancelledError:
                pass

        if self._upload_scheduler:
            self._upload_scheduler.stop()

        for task in (self._startup_upload_task, self._zone_task):
            if task and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass

        if self._file_ready.is_set():
            await self.drain()
        else:
            # File never resolved; these writes can't complete
            for task in list(self._pending_writes):
                task.cancel()
            await asyncio.gather(*list(self._pending_writes), return_exceptions=True)

        self._hooks.uninstall()
        self._state = BufferState.STOPPED
        logger.info("Log buffer stopped")

    # ---------------------------------------------------------------------
    # Collection
    # ---------------------------------------------------------------------

    def collect_log(self, text: str, label: str | Label) -> None:
        """Append a `[<timestamp>][<label>] <text>` record."""
        record = LogRecord.now(label, str(text))
        self._append(record, console_lines=(record.format(),))

    def report_error(self, details: ErrorDetails | BaseException) -> None:
        """Append a `[<timestamp>][report]` record with the error and its trace."""
        if isinstance(details, BaseException):
            details = ErrorDetails.from_exception(details)

        record = LogRecord.now(Label.REPORT, details.describe())
        self._append(record, console_lines=(record.header, record.body))

    def _append(self, record: LogRecord, console_lines: tuple[str, ...]) -> None:
        self._buffer.append(record.format())

        if self.debug_mode:
            for line in console_lines:
                _print_console(line)
            return

        self._schedule_write()

    def debug(self, text: str) -> None:
        self.collect_log(text, Label.DEBUG)

    def info(self, text: str) -> None:
        self.collect_log(text, Label.INFO)

    def warn(self, text: str) -> None:
        self.collect_log(text, Label.WARN)

    def error(self, text: str) -> None:
        self.collect_log(text, Label.ERROR)

    def fatal(self, text: str) -> None:
        self.collect_log(text, Label.FATAL)

    # ---------------------------------------------------------------------
    # File
    # ---------------------------------------------------------------------

    def _schedule_write(self) -> None:
        if self._state == BufferState.FAILED:
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # e.g. sys.excepthook after the loop is gone; next write picks it up
            logger.warning("No running event loop, record kept in memory only")
            return

        task = loop.create_task(self._write_file())
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    async def _write_file(self) -> None:
        """
        Append the records written since the last flush.

        Runs under the write lock so concurrent calls never write the same
        range twice. On failure the cursor stays put and the next call
        retries the same range.
        """
        await self._file_ready.wait()
        if self._local_file is None:
            return

        async with self._write_lock:
            new_length = len(self._buffer)
            if new_length <= self._flushed:
                return

            chunk = "\n".join(self._buffer[self._flushed:new_length]) + "\n"
            try:
                await self._local_file.append(chunk)
            except FileSinkError as e:
                self._write_error_count += 1
                logger.error(
                    f"Log file write failed, {new_length - self._flushed} records "
                    f"kept for next write: {e}"
                )
                return

            self._flushed = new_length
            self._file_changed = True
            self._write_generation += 1
            self._write_count += 1

    def print_buffer(self) -> None:
        _print_console("\n".join(self._buffer))

    async def _require_file(self) -> LocalLogFile:
        await self._file_ready.wait()
        if self._local_file is None:
            raise self._init_error or FileSinkError("log file not resolved")
        return self._local_file

    async def print_file(self) -> None:
        local_file = await self._require_file()
        _print_console(await local_file.read())

    async def read_file(self) -> str:
        local_file = await self._require_file()
        return await local_file.read()

    async def clear_file(self) -> None:
        """
        Truncate the log file.

        The in-memory buffer and the flush cursor are not reset, so records
        already written are not written again.
        """
        local_file = await self._require_file()
        async with self._write_lock:
            await local_file.clear()

    # ---------------------------------------------------------------------
    # Upload
    # ---------------------------------------------------------------------

    async def _upload(self) -> None:
        path = self._local_file.path
        try:
            result = self._upload_file(path)
            if inspect.isawaitable(result):
                await result
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._upload_error_count += 1
            raise UploadError(f"{e.__class__.__name__}: {e}", path=path) from e

        self._upload_count += 1

    async def _startup_upload(self) -> None:
        try:
            await self._upload()
            logger.info("Startup upload done")
        except UploadError as e:
            logger.warning(f"Startup upload failed: {e}")

    async def upload_if_changed(self) -> bool:
        """
        Upload the file if it changed since the last upload.

        This is the periodic tick. A failed upload keeps the file marked as
        changed so the next tick tries again.

        Returns:
            True if an upload succeeded
        """
        if not self._file_changed or self.debug_mode or self._local_file is None:
            return False

        generation = self._write_generation
        try:
            await self._upload()
        except UploadError as e:
            logger.warning(f"Upload failed, will retry next cycle: {e}")
            return False

        # A write landed while uploading: leave it for the next tick
        if self._write_generation == generation:
            self._file_changed = False

        logger.debug(f"Uploaded {self._local_file.path}")
        return True

    def get_stats(self) -> dict:
        return {
            "state": self._state.value,
            "debug_mode": self.debug_mode,
            "log_file": str(self.log_file) if self.log_file else None,
            "buffer_length": len(self._buffer),
            "flushed": self._flushed,
            "file_changed": self._file_changed,
            "pending_writes": len(self._pending_writes),
            "write_count": self._write_count,
            "write_error_count": self._write_error_count,
            "upload_count": self._upload_count,
            "upload_error_count": self._upload_error_count,
            "scheduler": self._upload_scheduler.get_stats() if self._upload_scheduler else None,
        }
