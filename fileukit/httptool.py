"""A small HTTP request tool: request templating, header formatting and response capture."""

from __future__ import annotations

import codecs
import dataclasses
import http.client
import re
import zlib
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import quote, urlsplit

USER_AGENT = "fileukit"
DEFAULT_HEADERS = (
    "Accept: */*\r\nAccept-Encoding: gzip, deflate\r\nUser-Agent: " + USER_AGENT
)
MAX_RESPONSE_SIZE = 4 * 1024 * 1024
DEFAULT_TIMEOUT = 10.0

STATUS_OK = "Success"
STATUS_TOO_LARGE = "response too large"

_CHUNK_SIZE = 64 * 1024
_URI_SAFE = "-_.!~*'()"
_CHARSET_RE = re.compile(rb"""charset\s*=\s*["']?\s*([A-Za-z0-9_.:-]+)""", re.IGNORECASE)


def format_request_string(headers: str) -> str:
    """Trim *headers* and end them with exactly one CRLF; empty input stays empty."""
    result = headers.strip().rstrip("\r\n")
    return result + "\r\n" if result else result


def format_url(url: str) -> str:
    """Prefix ``http://`` to a URL that starts with neither ``http://`` nor ``https://``.

    URLs shorter than eight characters are returned unchanged.
    """
    lowered = url.lower()
    if (
        len(url) >= 7
        and lowered[:7] != "http://"
        and len(url) >= 8
        and lowered[:8] != "https://"
    ):
        return "http://" + url
    return url


def count_matches(text: str, keyword: str) -> int:
    """Count non-overlapping, case-insensitive occurrences of *keyword* in *text*."""
    if not keyword:
        return 0
    return len(re.findall(re.escape(keyword), text, re.IGNORECASE))


@dataclass
class RequestValues:
    """Everything needed to send one request, including an optional URL/data template."""

    method: str = "GET"
    url: str = ""
    headers: str = DEFAULT_HEADERS
    content_type: str = ""
    data: str = ""
    tpl_name: str = ""
    tpl_prefix: str = ""
    tpl_text: str = ""

    def prepare(self) -> "RequestValues":
        """Return a copy with the template applied, the URL completed and headers formatted.

        When ``tpl_name`` is set, ``tpl_prefix + tpl_text`` is URI-encoded and
        replaces every occurrence of ``tpl_name`` in the URL and the data.
        """
        prepared = dataclasses.replace(self, url=format_url(self.url))
        if prepared.tpl_name:
            encoded = quote(prepared.tpl_prefix + prepared.tpl_text, safe=_URI_SAFE)
            prepared.tpl_text = encoded
            prepared.url = prepared.url.replace(prepared.tpl_name, encoded)
            prepared.data = prepared.data.replace(prepared.tpl_name, encoded)
        prepared.headers = format_request_string(prepared.headers)
        return prepared


def _detect_charset(data: bytes) -> str:
    if data.startswith(codecs.BOM_UTF8):
        return "utf-8-sig"
    if data.startswith(codecs.BOM_UTF16_LE) or data.startswith(codecs.BOM_UTF16_BE):
        return "utf-16"
    match = _CHARSET_RE.search(data[:1024])
    if match:
        name = match.group(1).decode("ascii", "replace")
        try:
            codecs.lookup(name)
        except LookupError:
            return "latin-1"
        return name
    return "latin-1"


@dataclass
class Response:
    """What came back from a request, formatted for display."""

    code: int = 0
    headers: str = ""
    cookies: str = ""
    status: str = STATUS_OK
    data: bytes = field(default=b"", repr=False)

    @property
    def text(self) -> str:
        """The body decoded by its BOM or HTML charset declaration, else as Latin-1."""
        return self.data.decode(_detect_charset(self.data), errors="replace")


def _parse_headers(headers: str) -> list[tuple[str, str]]:
    parsed = []
    for line in headers.splitlines():
        name, sep, value = line.partition(":")
        if sep and name.strip():
            parsed.append((name.strip(), value.strip()))
    return parsed


def _decode_body(data: bytes, encoding: str) -> bytes:
    encoding = encoding.strip().lower()
    try:
        if encoding == "gzip":
            return zlib.decompressobj(16 + zlib.MAX_WBITS).decompress(data)
        if encoding == "deflate":
            try:
                return zlib.decompress(data)
            except zlib.error:
                return zlib.decompress(data, -zlib.MAX_WBITS)
    except zlib.error:
        return data
    return data


def send_request(values: RequestValues, timeout: Optional[float] = DEFAULT_TIMEOUT) -> Response:
    """Send the request described by *values* (as given; see ``prepare``).

    The connection is not kept alive. Reading stops once more than
    ``MAX_RESPONSE_SIZE`` bytes have arrived, leaving ``status`` set to
    ``STATUS_TOO_LARGE``. Connection failures raise ``OSError``.
    """
    parts = urlsplit(values.url)
    scheme = parts.scheme.lower()
    if scheme == "http":
        connection_type = http.client.HTTPConnection
    elif scheme == "https":
        connection_type = http.client.HTTPSConnection
    else:
        raise ValueError(f"unsupported URL: {values.url!r}")
    if not parts.hostname:
        raise ValueError(f"URL has no host: {values.url!r}")

    target = parts.path or "/"
    if parts.query:
        target += "?" + parts.query
    headers = _parse_headers(values.headers)
    names = {name.lower() for name, _ in headers}
    body = values.data.encode("utf-8")

    connection = connection_type(parts.netloc, timeout=timeout)
    try:
        connection.putrequest(
            values.method or "GET",
            target,
            skip_host="host" in names,
            skip_accept_encoding=True,
        )
        for name, value in headers:
            connection.putheader(name, value)
        if "connection" not in names:
            connection.putheader("Connection", "close")
        if body:
            if values.content_type and "content-type" not in names:
                connection.putheader("Content-Type", values.content_type)
            if "content-length" not in names:
                connection.putheader("Content-Length", str(len(body)))
        connection.endheaders(body or None)

        reply = connection.getresponse()
        response = Response(code=reply.status)
        header_lines = []
        cookie_lines = []
        for name, value in reply.getheaders():
            if name.lower() == "set-cookie":
                cookie_lines.append(value + "\r\n")
            else:
                header_lines.append(f"{name}: {value}\r\n")
        response.headers = "".join(header_lines)
        response.cookies = "".join(cookie_lines)

        received = 0
        chunks = []
        while True:
            chunk = reply.read(_CHUNK_SIZE)
            if not chunk:
                break
            received += len(chunk)
            if received > MAX_RESPONSE_SIZE:
                response.status = STATUS_TOO_LARGE
                break
            chunks.append(chunk)
        raw = b"".join(chunks)
        if response.status == STATUS_OK:
            raw = _decode_body(raw, reply.getheader("Content-Encoding", ""))
        response.data = raw
        return response
    finally:
        connection.close()