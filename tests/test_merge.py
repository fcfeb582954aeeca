import os
import sys
from pathlib import Path
from unittest import mock

import pytest

from fileukit.merge import (
    MergeEntry,
    MergeError,
    collect_files,
    find_ffmpeg,
    merge_files,
    merge_video_audio,
    video_audio_command,
)

EXE = "ffmpeg.exe" if sys.platform.startswith("win") else "ffmpeg"


def _write(path: Path, data: bytes) -> Path:
    path.write_bytes(data)
    return path


def test_collect_files_skips_empty_and_missing(tmp_path):
    a = _write(tmp_path / "a.bin", b"abc")
    empty = _write(tmp_path / "e.bin", b"")
    b = _write(tmp_path / "b.bin", b"hello")
    missing = tmp_path / "nope.bin"
    entries = collect_files([a, empty, missing, str(b)])
    assert entries == [MergeEntry(a, 3), MergeEntry(b, 5)]


def test_merge_files_concatenates_in_order(tmp_path):
    parts = [_write(tmp_path / f"p{i}", bytes([i]) * (i + 1)) for i in range(3)]
    out = tmp_path / "out.bin"
    written = merge_files(out, parts)
    expected = b"".join(p.read_bytes() for p in parts)
    assert out.read_bytes() == expected
    assert written == len(expected)


def test_merge_files_empty_list_creates_empty_output(tmp_path):
    out = tmp_path / "out.bin"
    assert merge_files(out, []) == 0
    assert out.read_bytes() == b""


def test_merge_files_stops_after_current_file(tmp_path):
    first = _write(tmp_path / "1", b"first")
    second = _write(tmp_path / "2", b"second")
    out = tmp_path / "out.bin"
    merge_files(out, [first, second], should_stop=lambda: True)
    assert out.read_bytes() == b"first"


def test_merge_files_missing_input_raises(tmp_path):
    first = _write(tmp_path / "1", b"data")
    missing = tmp_path / "missing"
    out = tmp_path / "out.bin"
    with pytest.raises(MergeError) as info:
        merge_files(out, [first, missing])
    assert info.value.reason == "open_file_error"
    assert info.value.path == missing
    assert out.read_bytes() == b"data"


def test_merge_files_cannot_create_output(tmp_path):
    out = tmp_path / "no_dir" / "out.bin"
    with pytest.raises(MergeError) as info:
        merge_files(out, [])
    assert info.value.reason == "create_file_error"


def test_find_ffmpeg_direct_and_nested(tmp_path):
    d1 = tmp_path / "one"
    d2 = tmp_path / "two"
    d1.mkdir()
    (d2 / "ffmpeg").mkdir(parents=True)
    nested = _write(d2 / "ffmpeg" / EXE, b"x")
    assert find_ffmpeg([d1, d2]) == nested
    direct = _write(d1 / EXE, b"x")
    assert find_ffmpeg([d1, d2]) == direct


def test_find_ffmpeg_not_found(tmp_path):
    assert find_ffmpeg([tmp_path, tmp_path / "missing"]) is None


def test_video_audio_command():
    assert video_audio_command("ff", "v.mp4", "a.m4a", "o.mp4") == [
        "ff", "-i", "v.mp4", "-i", "a.m4a",
        "-vcodec", "copy", "-acodec", "copy", "o.mp4",
    ]


def test_merge_video_audio_rejects_missing_input(tmp_path):
    ff = _write(tmp_path / EXE, b"x")
    video = _write(tmp_path / "v.mp4", b"v")
    missing = tmp_path / "a.m4a"
    with pytest.raises(MergeError) as info:
        merge_video_audio(ff, video, missing, tmp_path / "o.mp4")
    assert info.value.reason == "file_path_error"
    assert info.value.path == missing


def test_merge_video_audio_rejects_empty_output(tmp_path):
    ff = _write(tmp_path / EXE, b"x")
    video = _write(tmp_path / "v.mp4", b"v")
    audio = _write(tmp_path / "a.m4a", b"a")
    with pytest.raises(MergeError) as info:
        merge_video_audio(ff, video, audio, "")
    assert info.value.reason == "file_path_error"


def test_merge_video_audio_runs_command(tmp_path):
    ff = _write(tmp_path / EXE, b"x")
    video = _write(tmp_path / "v.mp4", b"v")
    audio = _write(tmp_path / "a.m4a", b"a")
    out = tmp_path / "o.mp4"
    with mock.patch("subprocess.run") as run:
        run.return_value.returncode = 3
        code = merge_video_audio(ff, video, audio, out)
    assert code == 3
    args, _ = run.call_args
    assert args[0] == video_audio_command(ff, video, audio, out)
    assert args[0][-1] == os.fspath(out)