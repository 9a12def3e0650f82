"""Resource implementations which hold their content in memory, or wrap a
stream which has already been opened.

"""

from io import BytesIO
from threading import Lock
from typing import IO, Optional

from resio.exceptions import AlreadyConsumedError, ResourceIOError
from resio.implementations.base import LOGGER as IMPLEMENTATIONS_LOGGER
from resio.implementations.base import BaseResource
from resio.loggers import get_child_logger

LOGGER = get_child_logger("memory", IMPLEMENTATIONS_LOGGER)


class InMemoryResource(BaseResource):
    """A resource backed by a fixed byte buffer. It can be opened any number
    of times, but has no URL, URI or file path.

    """

    def __init__(self, data: bytes, description: Optional[str] = None):
        self._data = bytes(data)
        self._description = description or "resource loaded from byte array"

    @property
    def data(self) -> bytes:
        """The content of the resource."""
        return self._data

    def exists(self) -> bool:
        return True

    def open_stream(self) -> IO[bytes]:
        return BytesIO(self._data)

    def content_length(self) -> int:
        return len(self._data)

    def read_bytes(self) -> bytes:
        return self._data

    @property
    def description(self) -> str:
        return f"byte array resource [{self._description}]"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, InMemoryResource):
            return NotImplemented
        return self._data == other._data

    def __hash__(self) -> int:
        return hash(self._data)


class InputStreamResource(BaseResource):
    """A resource wrapping a stream which has already been opened.

    The stream can only be handed out once: any subsequent call to
    `open_stream` raises `AlreadyConsumedError`. This is safe to share
    between threads, but only one of them will get the stream.

    """

    def __init__(self, stream: IO[bytes], description: Optional[str] = None):
        self._stream = stream
        self._description = description or "resource loaded through stream"
        self._lock = Lock()
        self._consumed = False

    def exists(self) -> bool:
        return True

    def is_open(self) -> bool:
        return True

    @property
    def consumed(self) -> bool:
        """Whether the stream has been handed out by `open_stream`."""
        return self._consumed

    def open_stream(self) -> IO[bytes]:
        """Hand out the wrapped stream. This can only be done once."""
        with self._lock:
            if self._consumed:
                raise AlreadyConsumedError(
                    f"{self.description} has already been read, "
                    + "do not use it multiple times"
                )
            self._consumed = True
        LOGGER.debug("Handing out stream for %s", self.description)
        return self._stream

    def content_length(self) -> int:
        """Measure the remaining content of the stream without consuming it.
        This is only possible for seekable streams.

        """
        with self._lock:
            if self._consumed:
                raise AlreadyConsumedError(f"{self.description} has already been read")
            if not self._stream.seekable():
                raise ResourceIOError(
                    f"Unable to determine the length of {self.description} "
                    + "without consuming the stream"
                )
            position = self._stream.tell()
            try:
                end = self._stream.seek(0, 2)
            finally:
                self._stream.seek(position)
        return end - position

    @property
    def description(self) -> str:
        return f"InputStream resource [{self._description}]"

    def __eq__(self, other: object) -> bool:
        # Each wrapped stream is its own resource.
        if not isinstance(other, InputStreamResource):
            return NotImplemented
        return self._stream is other._stream

    def __hash__(self) -> int:
        return hash(self._stream)
