"""Starts the main program from the ``lib`` directory next to the launcher."""

from __future__ import annotations

import contextlib
import os
import sys
from pathlib import Path
from typing import Optional, Sequence, Union

PathLike = Union[str, os.PathLike]

LIB_DIR = "lib"
PROGRAM_NAME = "fileu"
WINDOWS_PROGRAM = "fileu.exe"
LOADER_NAME = "libc.so"

_WINDOWS = sys.platform.startswith("win")


def launch_command(executable: PathLike, argv: Sequence[str]) -> tuple[Path, list[str]]:
    """Return the working directory and the argument vector to run.

    The working directory is ``lib`` beside *executable*. The first element of
    the returned vector is the program to execute, relative to that directory.
    On Windows it is ``fileu.exe`` followed by *argv*; elsewhere the bundled
    loader ``libc.so`` is started with the full path of ``fileu`` and *argv*.
    """
    directory = Path(executable).parent / LIB_DIR
    arguments = list(argv)
    if _WINDOWS:
        return directory, [WINDOWS_PROGRAM, *arguments]
    return directory, [LOADER_NAME, os.fspath(directory / PROGRAM_NAME), *arguments]


def _own_executable() -> Path:
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve()
    return Path(sys.argv[0]).resolve()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Change into the ``lib`` directory and replace this process with the program.

    Returns only if the program could not be executed, in which case the
    ``OSError`` from the exec call is raised.
    """
    if argv is None:
        argv = sys.argv[1:]
    directory, arguments = launch_command(_own_executable(), argv)
    with contextlib.suppress(OSError):
        os.chdir(directory)
    os.execv(arguments[0], arguments)
    return 0


if __name__ == "__main__":
    sys.exit(main())