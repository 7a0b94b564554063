"""
Local Log File

The single plain-text file records are appended to. Blocking file I/O runs in
the default executor so log collection never stalls the event loop.
"""

import asyncio
from pathlib import Path

from errorlog.common.config import default_data_dir
from errorlog.common.exceptions import FileSinkError
from errorlog.common.logging_setup import get_service_logger

logger = get_service_logger("log_buffer.local_file")


class LocalLogFile:
    """
    Append-only text file for records.

    Features:
    - Append without rewriting earlier content
    - Read entire content (empty if the file does not exist yet)
    - Truncate on request
    """

    def __init__(self, path: Path):
        self.path = path

    @classmethod
    async def resolve(
        cls,
        file_name: str,
        log_dir: Path | None = None,
    ) -> "LocalLogFile":
        """
        Resolve the file inside the data directory, creating the directory.

        The file itself is created by the first append.
        """
        directory = log_dir or default_data_dir()
        try:
            await cls._run_io(directory.mkdir, parents=True, exist_ok=True)
        except OSError as e:
            raise FileSinkError(str(e), path=directory, operation="resolve") from e

        path = directory / file_name
        logger.debug(f"Log file resolved: {path}")
        return cls(path)

    @staticmethod
    async def _run_io(func, *args, **kwargs):
        """Run a blocking call in a thread to avoid blocking the event loop."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, lambda: func(*args, **kwargs))

    def _append_sync(self, contents: str) -> None:
        # Lone surrogates (surrogateescape-decoded names) are written escaped
        with open(self.path, "a", encoding="utf-8", errors="backslashreplace") as f:
            f.write(contents)

    def _read_sync(self) -> str:
        try:
            with open(self.path, "r", encoding="utf-8", errors="replace") as f:
                return f.read()
        except FileNotFoundError:
            return ""

    def _clear_sync(self) -> None:
        with open(self.path, "w", encoding="utf-8"):
            pass

    async def append(self, contents: str) -> None:
        """Append contents at the end of the file."""
        try:
            await self._run_io(self._append_sync, contents)
        except (OSError, UnicodeError) as e:
            raise FileSinkError(str(e), path=self.path, operation="append") from e

    async def read(self) -> str:
        try:
            return await self._run_io(self._read_sync)
        except (OSError, UnicodeError) as e:
            raise FileSinkError(str(e), path=self.path, operation="read") from e

    async def clear(self) -> None:
        """Truncate the file to empty."""
        try:
            await self._run_io(self._clear_sync)
        except OSError as e:
            raise FileSinkError(str(e), path=self.path, operation="clear") from e

    def exists(self) -> bool:
        return self.path.exists()

    def __repr__(self) -> str:
        return f"LocalLogFile({str(self.path)!r})"
