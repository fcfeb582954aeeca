"""Text and file checksums (CRC32, MD5, SHA-1, SHA-256) with cancellable background jobs."""

from __future__ import annotations

import enum
import hashlib
import os
import threading
import zlib
from pathlib import Path
from typing import Callable, Iterable, Mapping, Optional, Union

CHUNK_SIZE = 1 << 20

PathLike = Union[str, os.PathLike]
ProgressCallback = Callable[[int, int, int], None]
StopCallback = Callable[[], bool]


class Algorithm(enum.Enum):
    """Supported checksum algorithms, in the order they are computed and saved."""

    CRC32 = "crc32"
    MD5 = "md5"
    SHA1 = "sha1"
    SHA256 = "sha256"


class _Crc32:
    """Incremental CRC32 with the same update/result shape as hashlib objects."""

    def __init__(self) -> None:
        self._value = 0

    def update(self, data: bytes) -> None:
        self._value = zlib.crc32(data, self._value)

    def result(self) -> str:
        return str(self._value & 0xFFFFFFFF)


class _Hash:
    def __init__(self, name: str) -> None:
        self._hash = hashlib.new(name)

    def update(self, data: bytes) -> None:
        self._hash.update(data)

    def result(self) -> str:
        return self._hash.hexdigest()


def _new_digest(algorithm: Algorithm) -> Union[_Crc32, _Hash]:
    if algorithm is Algorithm.CRC32:
        return _Crc32()
    return _Hash(algorithm.value)


def text_checksums(text: Union[str, bytes]) -> dict[Algorithm, str]:
    """Return every checksum of *text*: CRC32 in decimal, the rest as lowercase hex."""
    data = text.encode("utf-8") if isinstance(text, str) else bytes(text)
    results = {}
    for algorithm in Algorithm:
        digest = _new_digest(algorithm)
        digest.update(data)
        results[algorithm] = digest.result()
    return results


def file_checksum(
    path: PathLike,
    algorithm: Algorithm,
    progress: Optional[ProgressCallback] = None,
    should_stop: Optional[StopCallback] = None,
) -> Optional[str]:
    """Checksum the file at *path* chunk by chunk.

    After each chunk ``progress(offset, size, file_size)`` is called, then
    ``should_stop()``; if it returns true, ``None`` is returned.
    """
    algorithm = Algorithm(algorithm)
    digest = _new_digest(algorithm)
    file_path = Path(path)
    file_size = file_path.stat().st_size
    offset = 0
    with file_path.open("rb") as stream:
        for chunk in iter(lambda: stream.read(CHUNK_SIZE), b""):
            digest.update(chunk)
            if progress is not None:
                progress(offset, len(chunk), file_size)
            offset += len(chunk)
            if should_stop is not None and should_stop():
                return None
    return digest.result()


def save_checksums(path: PathLike, results: Mapping[Algorithm, str]) -> list[Path]:
    """Write each non-empty result next to *path* as ``<path>.<algorithm>``.

    Each file holds ``"<checksum>  <file name>"``. Nothing is written if *path*
    does not exist. Returns the files written.
    """
    source = Path(path)
    if not str(path) or not source.exists():
        return []
    written = []
    for algorithm in Algorithm:
        value = results.get(algorithm, "")
        if not value:
            continue
        target = Path(f"{os.fspath(path)}.{algorithm.value}")
        target.write_bytes(f"{value}  {source.name}".encode("utf-8"))
        written.append(target)
    return written


class _State(enum.Enum):
    STOPPED = enum.auto()
    RUNNING = enum.auto()
    STOPPING = enum.auto()


class ChecksumJob:
    """Computes several checksums of one file, one thread per algorithm.

    ``on_progress(algorithm, file_size, offset, size)`` is called for each chunk
    and ``on_result(algorithm, value)`` for each finished checksum unless the
    job was stopped.
    """

    def __init__(
        self,
        path: PathLike,
        algorithms: Iterable[Algorithm] = tuple(Algorithm),
        on_progress: Optional[Callable[[Algorithm, int, int, int], None]] = None,
        on_result: Optional[Callable[[Algorithm, str], None]] = None,
    ) -> None:
        self.path = path
        self.algorithms = [Algorithm(a) for a in algorithms]
        self.on_progress = on_progress
        self.on_result = on_result
        self.results: dict[Algorithm, str] = {}
        self.errors: dict[Algorithm, OSError] = {}
        self.total_size = 0
        self._state = _State.STOPPED
        self._pending = 0
        self._first_key: Optional[Algorithm] = None
        self._lock = threading.Lock()
        self._threads: list[threading.Thread] = []

    def stopping(self) -> bool:
        """True unless the job is currently running."""
        return self._state is not _State.RUNNING

    def start(self) -> None:
        """Stop any previous run, then start computing all selected checksums."""
        self.stop()
        self.join()
        if not os.fspath(self.path) or not self.algorithms:
            return
        with self._lock:
            self._state = _State.RUNNING
            self.results = {}
            self.errors = {}
            self.total_size = 0
            self._first_key = None
            self._pending = len(self.algorithms)
        self._threads = [
            threading.Thread(target=self._run, args=(algorithm,), daemon=True)
            for algorithm in self.algorithms
        ]
        for thread in self._threads:
            thread.start()

    def stop(self) -> None:
        """Ask running workers to stop after their current chunk."""
        with self._lock:
            if self._state is _State.RUNNING:
                self._state = _State.STOPPING

    def join(self) -> None:
        """Wait for all worker threads."""
        for thread in self._threads:
            thread.join()
        self._threads = []

    def _progress(self, algorithm: Algorithm, offset: int, size: int, file_size: int) -> None:
        with self._lock:
            if self._first_key is None:
                self._first_key = algorithm
            if algorithm is self._first_key:
                self.total_size += size
        if self.on_progress is not None:
            self.on_progress(algorithm, file_size, offset, size)

    def _run(self, algorithm: Algorithm) -> None:
        value: Optional[str] = None
        try:
            value = file_checksum(
                self.path,
                algorithm,
                lambda offset, size, file_size: self._progress(algorithm, offset, size, file_size),
                self.stopping,
            )
        except OSError as error:
            with self._lock:
                self.errors[algorithm] = error
        publish = False
        with self._lock:
            if value is not None and not self.stopping():
                self.results[algorithm] = value
                publish = True
        if publish and self.on_result is not None:
            self.on_result(algorithm, value)
        with self._lock:
            self._pending -= 1
            if self._pending == 0:
                self._state = _State.STOPPED