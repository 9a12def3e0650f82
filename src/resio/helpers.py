"""Helpers for resource handling."""

import datetime as dt
import io
import posixpath
from io import TextIOWrapper
from typing import IO, Optional
from urllib.parse import quote, unquote, urlparse

from resio.type_hints import URI, Filename, Hostname, Scheme, URIPath

URI_SAFE_CHARACTERS = ":/?#[]@!$&'()*+,;=%~"
"""Characters which are left alone when making a URI out of a URL."""


class NonClosingTextIOWrapper(TextIOWrapper):
    """A TextIOWrapper implementation which detaches instead of closing
    the stream upon exit.

    """

    def __exit__(self, *_):
        """Exits the context and detaches"""
        try:
            self.detach()
        except ValueError:
            # Assume all ValuesErrors are safe to absorb.
            return


class StreamChannel(io.RawIOBase):
    """A raw, read-only channel over a byte stream. Closing the channel
    closes the underlying stream.

    """

    def __init__(self, stream: IO[bytes]):
        super().__init__()
        self._stream = stream

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:  # type: ignore[override]
        """Read up to `len(buffer)` bytes into the buffer, returning the number of
        bytes read (0 at the end of the stream).

        """
        data = self._stream.read(len(buffer))
        size = len(data)
        buffer[:size] = data
        return size

    def close(self):
        if self.closed:
            return
        try:
            self._stream.close()
        finally:
            super().close()


def parse_uri(uri: URI) -> tuple[Scheme, Hostname, URIPath]:
    """Parse a URI, yielding the scheme, hostname and URI path."""
    parse_result = urlparse(uri)
    scheme = parse_result.scheme.lower() or "file"  # Assume missing scheme is file URI.

    return scheme, parse_result.hostname, parse_result.path


def to_uri(url: URI) -> URI:
    """Percent-encode characters in a URL which are not legal in a URI (e.g. spaces),
    leaving existing escapes and reserved characters alone.

    """
    return quote(url, safe=URI_SAFE_CHARACTERS)


def clean_path(path: str) -> str:
    """Normalise a `/`-separated path lexically, collapsing `.` and `..`
    segments without touching any backing store.

    """
    if not path:
        return path
    cleaned = posixpath.normpath(path)
    if cleaned == ".":
        return ""
    return cleaned


def apply_relative_path(path: str, relative_path: str) -> str:
    """Apply a relative path to the directory of `path`.

    The last segment of `path` is dropped before joining, so a path with a
    trailing slash is treated as a directory:

    >>> apply_relative_path("/a/b/c.txt", "../d.txt")
    '/a/d.txt'
    >>> apply_relative_path("/a/b/", "c.txt")
    '/a/b/c.txt'

    """
    separator_index = path.rfind("/")
    if separator_index == -1:
        return clean_path(relative_path.lstrip("/"))

    new_path = path[:separator_index]
    if not relative_path.startswith("/"):
        new_path += "/"
    return clean_path(new_path + relative_path)


def get_file_name(uri: URI) -> Filename:
    """Get the file name from a URI."""
    return unquote(uri.rstrip("/").rsplit("/", 1)[-1])


def get_last_segment(path: URIPath) -> Optional[Filename]:
    """Get the last segment of a path, or `None` if the path is empty or
    refers to a directory (has a trailing slash).

    """
    if not path or path.endswith("/"):
        return None
    return unquote(path.rsplit("/", 1)[-1]) or None


def timestamp_to_datetime(timestamp: float) -> dt.datetime:
    """Convert a POSIX timestamp to an aware UTC datetime."""
    return dt.datetime.fromtimestamp(timestamp, tz=dt.timezone.utc)


def clean_locator(path: str) -> str:
    """Like `clean_path`, but keeps a trailing slash (marking a directory)."""
    cleaned = clean_path(path)
    if path.endswith("/") and not cleaned.endswith("/"):
        cleaned += "/"
    return cleaned
