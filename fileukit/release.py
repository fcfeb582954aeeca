"""Packaging a build directory into per-platform release archives."""

from __future__ import annotations

import os
import re
import threading
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional, Sequence, Union

PathLike = Union[str, os.PathLike]
ProgressCallback = Callable[[int], None]

WINDOWS_EXTENSIONS = (".exe", ".dll", ".lib")
LINUX_EXTENSIONS = (".sh", ".so", ".a")
ARCHIVE_SUFFIXES = ("_win_x64.zip", "_linux_x64.zip")
DEFAULT_OUTPUT_DIR = Path.home() / "Publish"

_ELF_MAGIC = b"\x7fELF"
_ELF_EXECUTABLE = 2


class ReleaseError(Exception):
    """Building a release failed; ``reason`` names the failure, ``path`` the file involved."""

    def __init__(self, reason: str, path: PathLike = "") -> None:
        self.reason = reason
        self.path = Path(path) if os.fspath(path) else None
        text = f"{reason} : {os.fspath(path)}" if os.fspath(path) else reason
        super().__init__(text)


@dataclass
class ReleaseFiles:
    """The entries of a build directory, sorted by the platform they belong to."""

    directories: list[Path] = field(default_factory=list)
    common: list[Path] = field(default_factory=list)
    windows: list[Path] = field(default_factory=list)
    linux: list[Path] = field(default_factory=list)
    total_size: int = 0


def is_windows_file(path: PathLike) -> bool:
    """True for ``.exe``, ``.dll`` and ``.lib`` files, in any letter case."""
    return Path(path).suffix.lower() in WINDOWS_EXTENSIONS


def _is_elf_executable(path: Path) -> bool:
    try:
        with path.open("rb") as stream:
            header = stream.read(18)
    except OSError:
        return False
    if len(header) < 18 or not header.startswith(_ELF_MAGIC):
        return False
    byteorder = "big" if header[5] == 2 else "little"
    return int.from_bytes(header[16:18], byteorder) == _ELF_EXECUTABLE


def is_linux_file(path: PathLike) -> bool:
    """True for shell scripts, shared and static libraries and extensionless ELF executables."""
    file_path = Path(path)
    name = file_path.name.lower()
    extension = file_path.suffix.lower()
    if extension in LINUX_EXTENSIONS:
        return True
    if ".so." in name or ".a." in name:
        return True
    return not extension and _is_elf_executable(file_path)


def is_ignored(path: PathLike, rules: Iterable[re.Pattern]) -> bool:
    """True if the file name of *path* matches one of *rules* in full."""
    name = Path(path).name
    return any(rule.fullmatch(name) for rule in rules)


def parse_ignore_rules(text: str) -> list[re.Pattern]:
    """Compile one regular expression per non-blank line; invalid ones are skipped."""
    rules = []
    for line in text.splitlines():
        if not line:
            continue
        try:
            rules.append(re.compile(line))
        except re.error:
            continue
    return rules


def _walk(directory: Path) -> Iterator[os.DirEntry]:
    with os.scandir(directory) as iterator:
        entries = sorted(iterator, key=lambda entry: entry.name)
    for entry in entries:
        yield entry
        if entry.is_dir(follow_symlinks=False):
            yield from _walk(Path(entry.path))


def collect_release_files(directory: PathLike, rules: Sequence[re.Pattern] = ()) -> ReleaseFiles:
    """Walk *directory* recursively and sort every entry not ignored by *rules*.

    Ignored directories are still walked; their entries are judged by their own names.
    """
    root = Path(directory)
    if not os.fspath(directory) or not root.is_dir():
        raise ReleaseError("read_directory_error", directory)
    files = ReleaseFiles()
    try:
        for entry in _walk(root):
            path = Path(entry.path)
            if is_ignored(path, rules):
                continue
            if entry.is_dir():
                files.directories.append(path)
            elif entry.is_file():
                if is_windows_file(path):
                    files.windows.append(path)
                elif is_linux_file(path):
                    files.linux.append(path)
                else:
                    files.common.append(path)
                files.total_size += entry.stat().st_size
    except OSError as error:
        raise ReleaseError("read_directory_error", getattr(error, "filename", None) or root) from error
    return files


class ReleaseBuilder:
    """Builds ``<name>_<version>_win_x64.zip`` and ``<name>_<version>_linux_x64.zip``.

    Each archive holds the common files followed by the files of its platform,
    stored relative to the build directory.
    """

    def __init__(
        self,
        name: str,
        version: float,
        directory: PathLike,
        output_dir: Optional[PathLike] = None,
        ignore_text: str = "",
    ) -> None:
        self.name = name
        self.version = float(version)
        self.directory = directory
        self.output_dir = DEFAULT_OUTPUT_DIR if output_dir is None else output_dir
        self.rules = parse_ignore_rules(ignore_text)
        self._closing = threading.Event()

    @property
    def release_name(self) -> str:
        """The archive base name: the name followed by the version to one decimal."""
        return f"{self.name}_{self.version:.1f}"

    def cancel(self) -> None:
        """Stop adding files; archives already opened are closed as they are."""
        self._closing.set()

    def build(self, progress: Optional[ProgressCallback] = None) -> list[Path]:
        """Write both archives and return their paths.

        ``progress(percent)`` is called after each file is added.
        """
        output_text = os.fspath(self.output_dir)
        output_dir = Path(self.output_dir)
        if output_text and not output_dir.exists():
            try:
                output_dir.mkdir(parents=True, exist_ok=True)
            except OSError as error:
                raise ReleaseError("create_directory_error", output_dir) from error
        if (
            not self.name
            or not output_text
            or not os.fspath(self.directory)
            or not output_dir.is_dir()
        ):
            raise ReleaseError("invalid_arguments")

        root = Path(self.directory)
        files = collect_release_files(root, self.rules)
        platforms = (files.windows, files.linux)
        total = sum(
            path.stat().st_size for group in platforms for path in (*files.common, *group)
        )
        finished = 0

        archives = []
        for suffix, platform_files in zip(ARCHIVE_SUFFIXES, platforms):
            target = output_dir / (self.release_name + suffix)
            try:
                archive = zipfile.ZipFile(target, "w", zipfile.ZIP_DEFLATED)
            except OSError as error:
                raise ReleaseError("create_file_error", target) from error
            with archive:
                for path in (*files.common, *platform_files):
                    if self._closing.is_set():
                        break
                    try:
                        archive.write(path, path.relative_to(root).as_posix())
                        finished += path.stat().st_size
                    except OSError as error:
                        raise ReleaseError("write_file_error", path) from error
                    if progress is not None:
                        percent = 100 if total == 0 else min(100, finished * 100 // total)
                        progress(percent)
            archives.append(target)
        return archives