# fileukit

A set of file tools for everyday use. It computes checksums, merges
files, probes HTTP servers and builds release archives. It needs only
the Python standard library. Merging video and audio also needs an
`ffmpeg` executable on the machine.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

### `fileukit.checksum`

- `Algorithm` lists the supported algorithms: `CRC32`, `MD5`, `SHA1` and
  `SHA256`.
- `text_checksums(text)` returns a dict that maps each `Algorithm` to its
  checksum of the text. The text is encoded as UTF-8 when given as `str`.
  CRC32 is given in decimal. The others are lowercase hex.
- `file_checksum(path, algorithm, progress=None, should_stop=None)` reads a
  file in 1 MiB chunks. After each chunk it calls
  `progress(offset, size, file_size)` and then `should_stop()`. If
  `should_stop()` returns true, the function returns `None`.
- `ChecksumJob(path, algorithms, on_progress, on_result)` runs one thread
  per algorithm over the same file.
  - It calls `on_progress(algorithm, file_size, offset, size)` for each
    chunk.
  - It calls `on_result(algorithm, value)` for each checksum that finishes
    while the job is still running.
  - It is controlled with `start()`, `stop()`, `join()` and `stopping()`.
  - Finished values are kept in `results`, read errors in `errors`, and the
    bytes read so far in `total_size`.
- `save_checksums(path, results)` writes each non-empty result to
  `<path>.<algorithm>`, for example `archive.zip.sha256`. Each file holds
  the checksum, two spaces and the file name. It returns the files
  written. Nothing is written if `path` does not exist.

### `fileukit.merge`

- `collect_files(files)` returns a `MergeEntry(path, size)` for each file.
  Missing and empty files are left out.
- `merge_files(output, paths, should_stop=None)` writes the files into
  `output` in order and returns the number of bytes written. It checks
  `should_stop()` after each file.
- `find_ffmpeg(search_paths=None)` looks for the `ffmpeg` executable in
  each directory and in an `ffmpeg` sub-directory of each. With no
  argument it searches `/usr/bin`, `/usr/local/bin` and `/bin/`, or the
  usual Windows directories on Windows.
- `video_audio_command(ffmpeg, video, audio, output)` builds an ffmpeg
  command line that copies both streams unchanged.
- `merge_video_audio(ffmpeg, video, audio, output)` runs that command and
  returns the exit code of ffmpeg.

Failures are raised as `MergeError`. Its `reason` is one of
`create_file_error`, `open_file_error`, `write_file_error` or
`file_path_error`, and its `path` names the file involved.

### `fileukit.httptool`

- `RequestValues` holds the parts of a request:
  - `method`, `url`, `headers`, `content_type` and `data`;
  - an optional template in `tpl_name`, `tpl_prefix` and `tpl_text`.

  `prepare()` returns a copy with the URL completed and the headers
  formatted. When `tpl_name` is set, the URI-encoded `tpl_prefix + tpl_text`
  replaces every occurrence of `tpl_name` in the URL and in the data.
- `format_url(url)` adds `http://` to a URL of eight or more characters
  that starts with neither `http://` nor `https://`.
- `format_request_string(headers)` trims a header block and ends it with
  exactly one CRLF.
- `send_request(values, timeout=10.0)` sends the request as it is given.
  It does not call `prepare()` itself. The connection is closed after
  the reply.
  - It returns a `Response` with `code`, `headers`, `cookies` (the
    `Set-Cookie` values), `status`, the raw `data` and the decoded `text`.
  - The body is limited to 4 MiB. Past that limit, `status` is set to
    `"response too large"`.
  - Bodies sent with gzip or deflate encoding are unpacked.
  - A URL that is not `http` or `https` raises `ValueError`, and so does a
    URL without a host.
  - Connection failures raise `OSError`.
- `count_matches(text, keyword)` counts the non-overlapping matches of a
  keyword in a text, ignoring case.

### `fileukit.release`

- `ReleaseBuilder(name, version, directory, output_dir=None, ignore_text="")`
  writes `<name>_<version>_win_x64.zip` and `<name>_<version>_linux_x64.zip`.
  - The version is written with one decimal place.
  - The output directory defaults to `~/Publish` and is created if it is
    missing.
  - Each archive holds the common files followed by the files for its
    platform. Paths are stored relative to the build directory.
  - `build(progress=None)` returns the paths of the two archives. It calls
    `progress(percent)` after each file is added.
  - `cancel()` stops adding files.
- `parse_ignore_rules(text)` compiles one regular expression per line and
  skips invalid ones.
- `is_ignored(path, rules)` is true when the file name matches a rule in
  full.
- `is_windows_file(path)` is true for `.exe`, `.dll` and `.lib` files.
- `is_linux_file(path)` is true for:
  - `.sh`, `.so` and `.a` files;
  - names that contain `.so.` or `.a.`;
  - ELF executables without an extension.
- `collect_release_files(directory, rules=())` walks the tree. It returns
  a `ReleaseFiles` record with `directories`, `common`, `windows`, `linux`
  and `total_size`.

Failures are raised as `ReleaseError`.

### `fileukit.launcher`

`launch_command(executable, argv)` returns the working directory and the
argument vector for the main program. The working directory is `lib`
next to `executable`.

- On Windows the vector is `fileu.exe` followed by `argv`.
- Elsewhere it starts the loader `libc.so` with the full path of `lib/fileu`,
  followed by `argv`.

The `fileukit-launch` command changes into that directory and replaces
itself with the program. It passes on every argument it was given:

```
fileukit-launch [arguments...]
```

## What this package does not do

The package has no graphical interface. It contains no program of its
own for `fileukit-launch` to start. That command runs only when a
`lib/fileu` program (or `lib/fileu.exe` on Windows) is already installed
next to the launcher. Otherwise it fails with the `OSError` raised by the
exec call.

All other tools are used as a Python library. They have no command line
of their own.