"""
Alert sources that turn external SAME decoder output into alert events.
"""

import asyncio
import logging
import os
import stat
import sys
from pathlib import Path
from typing import IO, AsyncIterator, List, Optional, TextIO, Union

from ..core.config import ConfigurationError
from ..core.models import AlertEnd, AlertEvent, AlertStart
from .header import SameHeaderError, is_end_of_message, parse_header

logger = logging.getLogger(__name__)


def parse_decoder_line(line: str) -> Optional[AlertEvent]:
    """
    Convert one line of decoder output into an alert event.

    Args:
        line: Decoder output line

    Returns:
        AlertStart, AlertEnd, or None for lines that carry no event
    """
    line = line.strip()
    if not line:
        return None

    if "ZCZC" in line:
        try:
            return AlertStart(parse_header(line))
        except SameHeaderError as e:
            logger.warning(f"Skipping undecodable header: {e}")
            return None

    if is_end_of_message(line):
        return AlertEnd()

    logger.debug(f"Ignoring decoder output: {line}")
    return None


class AlertSource:
    """Base class for alert event sources."""

    async def open(self) -> None:
        """Prepare the source; raise ConfigurationError if it cannot run."""
        pass

    def events(self) -> AsyncIterator[AlertEvent]:
        """Iterate alert events until the input is exhausted."""
        raise NotImplementedError

    async def close(self) -> None:
        """Release the source."""
        pass


class DecoderProcessSource(AlertSource):
    """
    Runs an external SAME decoder over this process's stdin.

    The decoder reads raw audio samples (e.g. piped from rtl_fm) and prints
    one line per decoded header and ``NNNN`` at the end of each message.
    """

    def __init__(self, command: List[str], sample_rate: int = 48000, stdin: Optional[TextIO] = None):
        self.command = [part.replace("{rate}", str(sample_rate)) for part in command]
        self.stdin = stdin if stdin is not None else sys.stdin
        self.process: Optional[asyncio.subprocess.Process] = None

    async def open(self) -> None:
        if self.stdin is None or self.stdin.isatty():
            raise ConfigurationError("No input provided to stdin. Please provide RTL FM input.")

        try:
            self.process = await asyncio.create_subprocess_exec(
                *self.command,
                stdin=self.stdin,
                stdout=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            raise ConfigurationError(f"SAME decoder not found: {self.command[0]}")
        except PermissionError:
            raise ConfigurationError(f"SAME decoder not executable: {self.command[0]}")

        logger.info(f"Started SAME decoder: {' '.join(self.command)}")

    async def events(self) -> AsyncIterator[AlertEvent]:
        if self.process is None:
            await self.open()

        async for raw in self.process.stdout:
            event = parse_decoder_line(raw.decode("ascii", errors="replace"))
            if event is not None:
                yield event

        returncode = await self.process.wait()
        logger.info(f"SAME decoder exited with code {returncode}")

    async def close(self) -> None:
        if self.process and self.process.returncode is None:
            self.process.terminate()
            try:
                await asyncio.wait_for(self.process.wait(), timeout=5.0)
            except asyncio.TimeoutError:
                self.process.kill()
                await self.process.wait()
        self.process = None


class HeaderFileSource(AlertSource):
    """
    Replays already-decoded header lines from a file or stdin ('-').

    A pipe on stdin is read through an asyncio stream so that shutdown can
    cancel a read that is waiting for the next line.
    """

    def __init__(self, path: Union[str, Path], stdin: Optional[IO] = None):
        self.path = str(path)
        self.stdin = stdin if stdin is not None else sys.stdin
        self._file: Optional[TextIO] = None
        self._reader: Optional[asyncio.StreamReader] = None
        self._transport: Optional[asyncio.ReadTransport] = None

    async def open(self) -> None:
        if self.path == "-":
            await self._open_stdin()
            return

        try:
            self._file = open(self.path, "r", encoding="utf-8", errors="replace")
        except OSError as e:
            raise ConfigurationError(f"Cannot open header file {self.path}: {e}")

    async def _open_stdin(self) -> None:
        if self.stdin is None or self.stdin.isatty():
            raise ConfigurationError("No header lines provided on stdin")

        fd = self.stdin.fileno()
        if stat.S_ISREG(os.fstat(fd).st_mode):
            # Redirected file; reads never block indefinitely
            self._file = open(fd, "r", encoding="utf-8", errors="replace", closefd=False)
            return

        loop = asyncio.get_running_loop()
        self._reader = asyncio.StreamReader()
        self._transport, _ = await loop.connect_read_pipe(
            lambda: asyncio.StreamReaderProtocol(self._reader),
            self.stdin,
        )

    async def _readline(self) -> str:
        if self._reader is not None:
            raw = await self._reader.readline()
            return raw.decode("utf-8", errors="replace")
        return await asyncio.to_thread(self._file.readline)

    async def events(self) -> AsyncIterator[AlertEvent]:
        if self._file is None and self._reader is None:
            await self.open()

        while True:
            line = await self._readline()
            if not line:
                break
            event = parse_decoder_line(line)
            if event is not None:
                yield event

    async def close(self) -> None:
        if self._transport is not None:
            self._transport.close()
        if self._file is not None:
            self._file.close()
        self._transport = None
        self._reader = None
        self._file = None
