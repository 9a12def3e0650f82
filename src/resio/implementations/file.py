"""A resource implementation built on top of the local filesystem."""

import datetime as dt
import os
import platform
import shutil
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Any, NoReturn, Optional, Union
from urllib.parse import unquote

from resio.exceptions import (
    ResourceAccessError,
    ResourceIOError,
    ResourceNotFoundError,
    UnsupportedSchemeError,
)
from resio.helpers import apply_relative_path, clean_locator, parse_uri, timestamp_to_datetime
from resio.implementations.base import LOGGER as IMPLEMENTATIONS_LOGGER
from resio.implementations.base import WritableResource
from resio.loggers import get_child_logger
from resio.type_hints import URI, PathStr, Scheme

FILE_URI_SCHEMES: set[Scheme] = {"file"}
"""A set of all allowed file URI schemes."""

LOGGER = get_child_logger("file", IMPLEMENTATIONS_LOGGER)


def file_uri_to_local_path(uri: URI) -> Path:
    """Resolve a `file://` URI to a local filesystem path."""
    scheme, hostname, path = parse_uri(uri)
    if scheme not in FILE_URI_SCHEMES:
        raise UnsupportedSchemeError(
            f"Local filesystem must use an allowed file URI scheme, got {scheme!r}"
        )

    path = unquote(path)
    # Unfortunately Windows is awkward.
    if platform.system() == "Windows":  # pragma: no cover linux
        path = path.lstrip("/")  # '/C:/' -> 'C:/'
        if hostname:  # If this is populated, we have a network path.
            hostname = unquote(hostname)
            return Path(f"//{hostname}/{path}")

    return Path(path)


def handle_os_error(
    err: Exception, resource: str, mode: str, extra_args: Optional[dict[str, Any]] = None
) -> NoReturn:
    """Translate an error from the local filesystem into a resource error."""
    message = f"Unable to access {resource} ({mode!r} mode, got {err!r})"
    if extra_args:
        extra = "; ".join(f"{k}: {v!r}" for k, v in extra_args.items())
        message = "".join((message, " ", "[", extra, "]"))

    if isinstance(err, FileNotFoundError):
        raise ResourceNotFoundError(message) from err
    if isinstance(err, PermissionError):
        raise ResourceAccessError(message) from err
    raise ResourceIOError(message) from err


class FileResource(WritableResource):
    """A resource backed by a path on the local filesystem."""

    SUPPORTED_SCHEMES = FILE_URI_SCHEMES

    def __init__(self, path: Union[PathStr, Path]):
        path_str = path.as_posix() if isinstance(path, Path) else path.replace(os.sep, "/")
        locator = clean_locator(path_str)
        self._locator = locator
        self._path = Path(locator or ".")
        # Fixed at creation, so later changes of working directory don't move it.
        self._absolute_path = self._path.absolute()

    @classmethod
    def from_uri(cls, uri: URI) -> "FileResource":
        """Build a file resource from a `file://` URI."""
        return cls(file_uri_to_local_path(uri))

    @property
    def path(self) -> Path:
        """The (normalised) path of the resource."""
        return self._path

    def exists(self) -> bool:
        """Checks whether anything (file or directory) exists at the path."""
        try:
            return self._path.exists()
        except OSError as err:
            LOGGER.debug("Existence check failed for %s: %r", self.description, err)
            return False

    def is_readable(self) -> bool:
        """Directories are never readable, even though they exist."""
        try:
            return (
                self._path.exists()
                and not self._path.is_dir()
                and os.access(self._path, os.R_OK)
            )
        except OSError as err:
            LOGGER.debug("Readability check failed for %s: %r", self.description, err)
            return False

    def is_file(self) -> bool:
        return True

    def open_stream(self) -> IO[bytes]:
        """Opens the file for reading as bytes"""
        LOGGER.debug("Opening %s", self.description)
        try:
            return self._path.open("rb")
        except Exception as err:  # pylint: disable=broad-except
            handle_os_error(err, self.description, "read")

    def open_channel(self) -> IO[bytes]:  # type: ignore[override]
        """Opens an unbuffered file object, which reads directly from the file."""
        try:
            return self._path.open("rb", buffering=0)
        except Exception as err:  # pylint: disable=broad-except
            handle_os_error(err, self.description, "read")

    def get_url(self) -> URI:
        return self._absolute_path.as_uri()

    def get_uri(self) -> URI:
        return self.get_url()

    def get_file(self) -> Path:
        return self._path

    def content_length(self) -> int:
        """Checks the size of the file"""
        try:
            return self._path.stat().st_size
        except Exception as err:  # pylint: disable=broad-except
            handle_os_error(err, self.description, "stat")

    def last_modified(self) -> dt.datetime:
        """Checks the modification time of the file"""
        try:
            return timestamp_to_datetime(self._path.stat().st_mtime)
        except Exception as err:  # pylint: disable=broad-except
            handle_os_error(err, self.description, "stat")

    def create_relative(self, relative_path: str) -> "FileResource":
        """Resolve the relative path against the directory containing this file."""
        return type(self)(apply_relative_path(self._locator, relative_path))

    @property
    def filename(self) -> Optional[str]:
        return self._path.name or None

    @property
    def description(self) -> str:
        return f"file [{self._absolute_path}]"

    def is_writable(self) -> bool:
        """The file must either be writable, or creatable in a writable directory."""
        try:
            if self._path.is_dir():
                return False
            if self._path.exists():
                return os.access(self._path, os.W_OK)
            parent = next((p for p in self._path.absolute().parents if p.exists()), None)
            return parent is not None and parent.is_dir() and os.access(parent, os.W_OK)
        except OSError as err:
            LOGGER.debug("Writability check failed for %s: %r", self.description, err)
            return False

    def put_byte_stream(self, byte_stream: IO[bytes]):
        """Writes a stream of bytes to the file, creating parent directories."""
        with self.open_output_stream() as file:
            shutil.copyfileobj(byte_stream, file)

    @contextmanager
    def open_output_stream(self) -> Iterator[IO[bytes]]:
        """Opens the file for writing as bytes, creating parent directories."""
        try:
            if not self._path.parent.exists():
                self._path.parent.mkdir(parents=True, exist_ok=True)
            file = self._path.open("wb")
        except Exception as err:  # pylint: disable=broad-except
            handle_os_error(err, self.description, "write")

        LOGGER.debug("Writing to %s", self.description)
        with file:
            yield file
