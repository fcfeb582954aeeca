"""Joining files end to end, and muxing a video with an audio track through ffmpeg."""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence, Union

PathLike = Union[str, os.PathLike]

if sys.platform.startswith("win"):
    DEFAULT_SEARCH_PATHS: tuple[str, ...] = (
        "c:\\windows\\",
        "c:\\windows\\system32",
        "c:\\Program Files",
    )
    _EXECUTABLE_NAME = "ffmpeg.exe"
else:
    DEFAULT_SEARCH_PATHS = ("/usr/bin", "/usr/local/bin", "/bin/")
    _EXECUTABLE_NAME = "ffmpeg"


class MergeError(Exception):
    """A merge step failed; ``reason`` names the failure, ``path`` the file involved."""

    def __init__(self, reason: str, path: PathLike) -> None:
        self.reason = reason
        self.path = Path(path)
        super().__init__(f"{reason} : {os.fspath(path)}")


@dataclass(frozen=True)
class MergeEntry:
    """A non-empty file queued for merging."""

    path: Path
    size: int


def collect_files(files: Iterable[PathLike]) -> list[MergeEntry]:
    """Return entries for the given files, skipping missing and empty ones."""
    entries = []
    for file in files:
        path = Path(file)
        try:
            size = path.stat().st_size
        except OSError:
            continue
        if size > 0:
            entries.append(MergeEntry(path, size))
    return entries


def merge_files(
    output: PathLike,
    paths: Sequence[PathLike],
    should_stop: Optional[Callable[[], bool]] = None,
) -> int:
    """Write the contents of *paths*, in order, into *output*.

    ``should_stop()`` is checked after each file; when it returns true no
    further files are written. Returns the number of bytes written.
    """
    try:
        out = open(output, "wb")
    except OSError as error:
        raise MergeError("create_file_error", output) from error
    written = 0
    with out:
        for path in paths:
            try:
                source = open(path, "rb")
            except OSError as error:
                raise MergeError("open_file_error", path) from error
            with source:
                try:
                    for chunk in iter(lambda: source.read(1 << 20), b""):
                        out.write(chunk)
                        written += len(chunk)
                except OSError as error:
                    raise MergeError("write_file_error", path) from error
            if should_stop is not None and should_stop():
                break
    return written


def find_ffmpeg(search_paths: Optional[Iterable[PathLike]] = None) -> Optional[Path]:
    """Look for the ffmpeg executable in *search_paths*.

    Each directory is checked for the executable itself, then for an
    ``ffmpeg`` sub-directory holding it. Returns ``None`` when not found.
    """
    if search_paths is None:
        search_paths = DEFAULT_SEARCH_PATHS
    for directory in search_paths:
        base = Path(directory)
        direct = base / _EXECUTABLE_NAME
        nested_dir = base / "ffmpeg"
        if direct.is_file():
            return direct
        if nested_dir.is_dir() and (nested_dir / _EXECUTABLE_NAME).is_file():
            return nested_dir / _EXECUTABLE_NAME
    return None


def video_audio_command(
    ffmpeg: PathLike, video: PathLike, audio: PathLike, output: PathLike
) -> list[str]:
    """Build the ffmpeg command line that copies both streams into *output*."""
    return [
        os.fspath(ffmpeg),
        "-i",
        os.fspath(video),
        "-i",
        os.fspath(audio),
        "-vcodec",
        "copy",
        "-acodec",
        "copy",
        os.fspath(output),
    ]


def merge_video_audio(
    ffmpeg: PathLike, video: PathLike, audio: PathLike, output: PathLike
) -> int:
    """Run ffmpeg to merge *video* and *audio* into *output*; return its exit code.

    Raises MergeError if any input is not a regular file or *output* is empty.
    """
    for path in (ffmpeg, video, audio):
        if not os.fspath(path) or not Path(path).is_file():
            raise MergeError("file_path_error", path)
    if not os.fspath(output):
        raise MergeError("file_path_error", output)
    command = video_audio_command(ffmpeg, video, audio, output)
    if shutil.which(command[0]) is None and not Path(command[0]).is_file():
        raise MergeError("file_path_error", ffmpeg)
    return subprocess.run(command, check=False).returncode