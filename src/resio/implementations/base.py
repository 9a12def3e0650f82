"""The abstract resource contract, and the contract for writable resources."""

import datetime as dt
import hashlib
import tempfile
from abc import ABCMeta, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import IO, ClassVar, Optional

from resio.exceptions import (
    ResolutionError,
    ResourceNotFoundError,
    UnsupportedLocatorError,
    UnsupportedSchemeError,
)
from resio.helpers import StreamChannel, timestamp_to_datetime, to_uri
from resio.loggers import ROOT_LOGGER, get_child_logger
from resio.type_hints import URI, Scheme

READ_BLOCK_SIZE = 1024**2
"""The size of the blocks used when reading through a resource, in bytes."""

LOGGER = get_child_logger("implementations", ROOT_LOGGER)


class BaseResource(metaclass=ABCMeta):
    """A handle on a readable resource in some backing store (the local
    filesystem, an embedded package, a URL, an object store or memory).

    A handle's locator is fixed at construction. Nothing about the backing
    store is cached: `exists`, `content_length` and `last_modified` query it
    afresh on every call. Streams returned by `open_stream` belong to the
    caller, who must close them (they are context managers).

    """

    SUPPORTED_SCHEMES: ClassVar[set[Scheme]] = set()
    """URI schemes which can be used to construct this resource type."""

    @classmethod
    def from_uri(cls, uri: URI) -> "BaseResource":
        """Build a resource from a URI with one of the supported schemes."""
        raise UnsupportedSchemeError(f"{cls.__name__} cannot be built from a URI ({uri!r})")

    @abstractmethod
    def exists(self) -> bool:
        """Whether the backing store currently has content for the resource.

        This must never raise: errors from the backing store are treated as
        the resource not existing.

        """

    def is_readable(self) -> bool:
        """Whether the content of the resource can be read with `open_stream`.
        Like `exists`, this must never raise.

        """
        return self.exists()

    def is_open(self) -> bool:
        """Whether the resource wraps an already-open stream, which can only be
        opened once.

        """
        return False

    def is_file(self) -> bool:
        """Whether the resource is backed directly by a local filesystem path."""
        return False

    @abstractmethod
    def open_stream(self) -> IO[bytes]:
        """Open a fresh binary stream over the current content of the resource.

        Raises `ResourceNotFoundError` if the content is absent,
        `ResourceAccessError` if access is denied and `ResourceIOError`
        for other failures.

        """

    def open_channel(self) -> StreamChannel:
        """Open a raw channel over the content of the resource. By default
        this wraps `open_stream`.

        """
        return StreamChannel(self.open_stream())

    def get_url(self) -> URI:
        """Get the locator of the resource as a URL."""
        raise UnsupportedLocatorError(f"{self.description} cannot be resolved to a URL")

    def get_uri(self) -> URI:
        """Get the locator of the resource as a URI. By default this is the
        URL, with any characters which are not legal in a URI escaped.

        """
        return to_uri(self.get_url())

    def get_file(self) -> Path:
        """Get the local filesystem path of the resource."""
        raise UnsupportedLocatorError(
            f"{self.description} cannot be resolved to an absolute file path"
        )

    def _ensure_exists(self):
        """Raise `ResourceNotFoundError` if the resource does not exist."""
        if not self.exists():
            raise ResourceNotFoundError(f"{self.description} does not exist")

    def content_length(self) -> int:
        """Get the size of the resource, in bytes.

        By default, this reads through the whole resource.

        """
        self._ensure_exists()
        content_length = 0
        with self.open_stream() as stream:
            while True:
                block = stream.read(READ_BLOCK_SIZE)
                if not block:
                    break
                content_length += len(block)
        return content_length

    def last_modified(self) -> dt.datetime:
        """Get the time the resource was last modified, in UTC.

        By default, this is taken from the file returned by `get_file`.

        """
        self._ensure_exists()
        return timestamp_to_datetime(self.get_file().stat().st_mtime)

    def create_relative(self, relative_path: str) -> "BaseResource":
        """Create a resource of the same type, with a locator relative to the
        location of this resource.

        """
        raise ResolutionError(f"Cannot create a relative resource for {self.description}")

    @property
    def filename(self) -> Optional[str]:
        """The last segment of the resource's path, if it has one."""
        return None

    @property
    @abstractmethod
    def description(self) -> str:
        """A human readable description of the resource, for use in logs and
        error messages.

        """

    def read_bytes(self) -> bytes:
        """Read the full content of the resource."""
        with self.open_stream() as stream:
            return stream.read()

    def read_text(self, encoding: str = "utf-8") -> str:
        """Read the full content of the resource as text."""
        return self.read_bytes().decode(encoding)

    def digest(self, algorithm: str = "md5") -> str:
        """Get the digest (AKA checksum) of the resource using the specified
        hashing algorithm.

        """
        hash_func = hashlib.new(algorithm)
        with self.open_stream() as stream:
            while True:
                block = stream.read(READ_BLOCK_SIZE)
                if not block:
                    break
                hash_func.update(block)

        return hash_func.hexdigest()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BaseResource):
            return NotImplemented
        return type(self) is type(other) and self.description == other.description

    def __hash__(self) -> int:
        return hash(self.description)

    def __str__(self) -> str:
        return self.description

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.description!r}>"


class WritableResource(BaseResource):
    """A resource whose backing store accepts writes."""

    @abstractmethod
    def is_writable(self) -> bool:
        """Whether the content of the resource can be replaced. This must
        never raise.

        """

    @abstractmethod
    def put_byte_stream(self, byte_stream: IO[bytes]):
        """Replace the content of the resource with the bytes in the stream."""

    @contextmanager
    def open_output_stream(self) -> Iterator[IO[bytes]]:
        """Open a binary stream to replace the content of the resource.

        The content is written to a temporary file and only transferred to
        the resource if the context exits without an error.

        """
        with tempfile.TemporaryFile("w+b") as temp_file:
            yield temp_file
            temp_file.flush()
            temp_file.seek(0)
            LOGGER.debug("Writing spooled content to %s", self.description)
            self.put_byte_stream(temp_file)

    def write_bytes(self, data: bytes):
        """Replace the content of the resource with `data`."""
        with self.open_output_stream() as stream:
            stream.write(data)


