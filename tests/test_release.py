import zipfile
from pathlib import Path

import pytest

from fileukit.release import (
    ReleaseBuilder,
    ReleaseError,
    ReleaseFiles,
    collect_release_files,
    is_ignored,
    is_linux_file,
    is_windows_file,
    parse_ignore_rules,
)


def _elf(e_type: int) -> bytes:
    return b"\x7fELF\x02\x01\x01" + b"\x00" * 9 + e_type.to_bytes(2, "little") + b"\x00" * 16


@pytest.fixture
def build_dir(tmp_path):
    root = tmp_path / "build"
    (root / "bin").mkdir(parents=True)
    (root / "bin" / "app.exe").write_bytes(b"windows")
    (root / "bin" / "core.DLL").write_bytes(b"windows lib")
    (root / "bin" / "libcore.so.1").write_bytes(b"linux lib")
    (root / "run.sh").write_bytes(b"#!/bin/sh\n")
    (root / "readme.txt").write_bytes(b"read me")
    (root / "debug.log").write_bytes(b"ignored")
    return root


@pytest.mark.parametrize(
    "name, expected",
    [("a.exe", True), ("b.DLL", True), ("c.Lib", True), ("d.so", False), ("e.txt", False)],
)
def test_is_windows_file(name, expected):
    assert is_windows_file(name) is expected


@pytest.mark.parametrize(
    "name, expected",
    [
        ("x.sh", True),
        ("libx.SO", True),
        ("libx.a", True),
        ("libx.so.1.2", True),
        ("liby.a.3", True),
        ("x.exe", False),
        ("x.txt", False),
    ],
)
def test_is_linux_file_by_name(name, expected):
    assert is_linux_file(name) is expected


def test_is_linux_file_detects_elf_executable(tmp_path):
    exe = tmp_path / "tool"
    exe.write_bytes(_elf(2))
    shared = tmp_path / "plugin"
    shared.write_bytes(_elf(3))
    text = tmp_path / "notes"
    text.write_bytes(b"plain text here, nothing more")
    assert is_linux_file(exe) is True
    assert is_linux_file(shared) is False
    assert is_linux_file(text) is False


def test_parse_ignore_rules_skips_invalid_and_blank():
    rules = parse_ignore_rules(".*\\.log\n\n(unclosed\ntemp")
    assert [rule.pattern for rule in rules] == [".*\\.log", "temp"]


def test_is_ignored_requires_full_match():
    rules = parse_ignore_rules(".*\\.log\ntemp")
    assert is_ignored("dir/debug.log", rules) is True
    assert is_ignored("dir/temp", rules) is True
    assert is_ignored("dir/temporary", rules) is False
    assert is_ignored("dir/debug.log.txt", rules) is False


def test_collect_release_files_classifies(build_dir):
    files = collect_release_files(build_dir, parse_ignore_rules(".*\\.log"))
    assert isinstance(files, ReleaseFiles)
    assert files.directories == [build_dir / "bin"]
    assert sorted(p.name for p in files.windows) == ["app.exe", "core.DLL"]
    assert [p.name for p in files.linux] == ["libcore.so.1", "run.sh"] or sorted(
        p.name for p in files.linux
    ) == ["libcore.so.1", "run.sh"]
    assert [p.name for p in files.common] == ["readme.txt"]
    expected_total = sum(
        p.stat().st_size for p in (*files.windows, *files.linux, *files.common)
    )
    assert files.total_size == expected_total


def test_collect_walks_into_ignored_directory(build_dir):
    files = collect_release_files(build_dir, parse_ignore_rules("bin"))
    assert build_dir / "bin" not in files.directories
    assert build_dir / "bin" / "app.exe" in files.windows


def test_collect_missing_directory_raises(tmp_path):
    with pytest.raises(ReleaseError):
        collect_release_files(tmp_path / "missing")


def test_build_creates_platform_archives(build_dir, tmp_path):
    out = tmp_path / "out" / "nested"
    builder = ReleaseBuilder("app", 1, build_dir, out, ".*\\.log")
    seen = []
    archives = builder.build(seen.append)
    assert [a.name for a in archives] == ["app_1.0_win_x64.zip", "app_1.0_linux_x64.zip"]
    with zipfile.ZipFile(archives[0]) as win:
        assert sorted(win.namelist()) == ["bin/app.exe", "bin/core.DLL", "readme.txt"]
        assert win.read("bin/app.exe") == b"windows"
    with zipfile.ZipFile(archives[1]) as lin:
        assert sorted(lin.namelist()) == ["bin/libcore.so.1", "readme.txt", "run.sh"]
    assert seen == sorted(seen)
    assert seen[-1] == 100


def test_common_files_come_first(build_dir, tmp_path):
    archives = ReleaseBuilder("app", 2.5, build_dir, tmp_path / "out", ".*\\.log").build()
    with zipfile.ZipFile(archives[0]) as win:
        assert win.namelist()[0] == "readme.txt"
    assert archives[0].name.startswith("app_2.5")


def test_build_rejects_empty_name(build_dir, tmp_path):
    with pytest.raises(ReleaseError):
        ReleaseBuilder("", 1.0, build_dir, tmp_path / "out").build()


def test_build_rejects_missing_directory(tmp_path):
    with pytest.raises(ReleaseError):
        ReleaseBuilder("app", 1.0, tmp_path / "missing", tmp_path / "out").build()


def test_cancel_leaves_archives_empty(build_dir, tmp_path):
    builder = ReleaseBuilder("app", 1.0, build_dir, tmp_path / "out")
    builder.cancel()
    archives = builder.build()
    assert all(Path(a).exists() for a in archives)
    for archive in archives:
        with zipfile.ZipFile(archive) as handle:
            assert handle.namelist() == []