"""Line-prefixed multiplexing of child process output."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import BinaryIO

import click

_CHUNK_SIZE = 65_536


class Console:
    """Serialized writer for prefixed output and status lines.

    Every call writes one or more complete lines under a shared lock, so lines
    from concurrent workers never interleave mid-line.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()

    def write_stdout(self, data: bytes) -> None:
        with self._lock:
            click.echo(data, nl=False)

    def write_stderr(self, data: bytes) -> None:
        with self._lock:
            click.echo(data, nl=False, err=True)

    def info(self, message: str) -> None:
        with self._lock:
            click.echo(message)

    def error(self, message: str) -> None:
        with self._lock:
            click.echo(message, err=True)


class LinePrefixer:
    """Reassembles arbitrary chunks into prefixed, newline-terminated lines."""

    def __init__(self, prefix: bytes, write: Callable[[bytes], None]) -> None:
        self._prefix = prefix
        self._write = write
        self._buffer = bytearray()

    def feed(self, chunk: bytes) -> None:
        self._buffer.extend(chunk)
        while (index := self._buffer.find(b"\n")) != -1:
            line = bytes(self._buffer[: index + 1])
            del self._buffer[: index + 1]
            self._write(self._prefix + line)

    def close(self) -> None:
        if self._buffer:
            remainder = bytes(self._buffer)
            self._buffer.clear()
            self._write(self._prefix + remainder + b"\n")


def pump_stream(stream: BinaryIO, prefixer: LinePrefixer) -> None:
    """Copy ``stream`` into ``prefixer`` until EOF, then flush the last partial line."""

    read = getattr(stream, "read1", stream.read)
    try:
        while True:
            chunk = read(_CHUNK_SIZE)
            if not chunk:
                break
            prefixer.feed(chunk)
    finally:
        prefixer.close()
        stream.close()


def start_pump(stream: BinaryIO, prefixer: LinePrefixer, *, name: str) -> threading.Thread:
    thread = threading.Thread(
        target=pump_stream,
        args=(stream, prefixer),
        daemon=True,
        name=name,
    )
    thread.start()
    return thread
