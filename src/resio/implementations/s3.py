"""A resource implementation for objects in AWS S3."""

# pylint: disable=broad-except
import datetime as dt
from contextlib import contextmanager
from threading import Lock
from typing import IO, Any, NoReturn, Optional
from urllib.parse import quote, unquote

import boto3
from botocore.exceptions import ClientError

from resio.exceptions import (
    ResolutionError,
    ResourceAccessError,
    ResourceIOError,
    ResourceNotFoundError,
    UnsupportedSchemeError,
)
from resio.helpers import apply_relative_path, get_last_segment, parse_uri
from resio.implementations.base import LOGGER as IMPLEMENTATIONS_LOGGER
from resio.implementations.base import WritableResource
from resio.loggers import get_child_logger
from resio.settings import get_settings
from resio.type_hints import URI, Scheme

Bucket = str
"""An S3 bucket."""
Key = str
"""A key within an S3 bucket."""

S3_SCHEMES: set[Scheme] = {"s3", "s3a"}
"""URI schemes for S3 objects."""
NOT_FOUND_CODES = {"NoSuchKey", "NoSuchBucket", "404"}
"""Error codes which indicate the object does not exist."""
ACCESS_DENIED_CODES = {"AccessDenied", "403"}
"""Error codes which indicate access to the object was denied."""

LOGGER = get_child_logger("s3", IMPLEMENTATIONS_LOGGER)


class SessionPool:
    """A pool of boto3 sessions to use across threads"""

    def __init__(self):
        self._lock: Lock = Lock()
        self._pool: list[boto3.Session] = []

    def pop(self) -> boto3.Session:
        """Take a session from the pool. If no sessions exist,
        create one.
        """
        with self._lock:
            if len(self._pool) == 0:
                return boto3.Session()
            return self._pool.pop()

    def put(self, session: boto3.Session):
        """Return a session to the pool"""
        with self._lock:
            self._pool.append(session)


@contextmanager
def get_session(session_pool: SessionPool):
    """Helper to manage session pool access."""
    session = session_pool.pop()
    try:
        yield session
    finally:
        session_pool.put(session)


_session_pool: SessionPool = SessionPool()


def parse_s3_uri(uri: URI) -> tuple[Scheme, Bucket, Key]:
    """Parse an S3 URI to a scheme, bucket and key"""
    scheme, bucket, key = parse_uri(uri)
    if scheme not in S3_SCHEMES:
        raise UnsupportedSchemeError(f"Scheme {scheme!r} not supported for S3 objects")

    if not bucket:
        raise ResolutionError(f"Missing hostname (bucket) for S3 URI {uri!r}")
    bucket, key = unquote(bucket), unquote(key)
    if key.startswith("/"):
        key = key[1:]

    return scheme, bucket, key


def build_s3_uri(*, scheme: Scheme = "s3", bucket: Bucket, key: Key) -> URI:
    """Build an S3 URI from the bucket and key (and optionally the scheme)."""
    bucket, key = quote(bucket), quote(key)
    return f"{scheme}://{bucket}/{key}"


class S3Resource(WritableResource):
    """A resource backed by an object in an S3 bucket."""

    SUPPORTED_SCHEMES = S3_SCHEMES

    def __init__(self, bucket: Bucket, key: Key, scheme: Scheme = "s3"):
        if scheme not in self.SUPPORTED_SCHEMES:
            raise UnsupportedSchemeError(f"Scheme {scheme!r} not supported for S3 objects")
        if not bucket:
            raise ResolutionError("A bucket is required to locate an S3 object")
        self._bucket = bucket
        self._key = key.lstrip("/")
        self._scheme = scheme

    @classmethod
    def from_uri(cls, uri: URI) -> "S3Resource":
        scheme, bucket, key = parse_s3_uri(uri)
        return cls(bucket, key, scheme)

    @property
    def bucket(self) -> Bucket:
        """The bucket containing the object."""
        return self._bucket

    @property
    def key(self) -> Key:
        """The key of the object within the bucket."""
        return self._key

    @staticmethod
    def _client_args() -> dict[str, Any]:
        """Keyword arguments for boto3 clients and resources."""
        return {"endpoint_url": get_settings().s3_endpoint_url}

    def _handle_boto_error(
        self,
        err: Exception,
        access_type: str,
        extra_args: Optional[dict[str, Any]] = None,
    ) -> NoReturn:
        """Handle an error from boto3."""
        error_code = None
        if not isinstance(err, ClientError):
            extra = f"unexpected error: {err!r}"
        else:
            error_code = err.response["Error"]["Code"]
            if error_code in NOT_FOUND_CODES | ACCESS_DENIED_CODES:
                extra = repr(error_code)
            else:
                extra = f"unexpected error: {error_code!r}"

        message = f"Unable to access {self.description} (attempted {access_type}, got {extra})"

        if extra_args:
            extra = "; ".join(f"{k}: {v!r}" for k, v in extra_args.items())
            message = "".join((message, " ", "[", extra, "]"))

        if error_code in NOT_FOUND_CODES:
            raise ResourceNotFoundError(message) from err
        if error_code in ACCESS_DENIED_CODES:
            raise ResourceAccessError(message) from err
        raise ResourceIOError(message) from err

    def _names_object(self) -> bool:
        """Whether the key can name an object (rather than the bucket root or a
        'directory' prefix).

        """
        return bool(self._key) and not self._key.endswith("/")

    def _ensure_names_object(self):
        """Raise `ResourceNotFoundError` if the key cannot name an object."""
        if not self._names_object():
            raise ResourceNotFoundError(
                f"{self.description} does not exist, the key does not name an object"
            )

    def exists(self) -> bool:
        """Checks that the object exists with a HEAD request"""
        if not self._names_object():
            return False
        with get_session(_session_pool) as session:
            try:
                s3_resource = session.resource("s3", **self._client_args())
                s3_resource.Object(self._bucket, self._key).load()
            except Exception as err:
                LOGGER.debug("Existence check failed for %s: %r", self.description, err)
                return False
        return True

    def open_stream(self) -> IO[bytes]:
        """Gets the object as a stream of bytes"""
        self._ensure_names_object()
        LOGGER.debug("Opening %s", self.description)
        with get_session(_session_pool) as session:
            try:
                client = session.client("s3", **self._client_args())
                obj = client.get_object(Bucket=self._bucket, Key=self._key)
                body: IO[bytes] = obj["Body"]  # type: ignore
            except Exception as err:
                self._handle_boto_error(err, "read")
        return body

    def _load_object(self):
        """Load the object's metadata. Any failure other than a denial of access
        raises `ResourceNotFoundError`, as `exists` is false for all of them.

        """
        self._ensure_names_object()
        with get_session(_session_pool) as session:
            try:
                s3_resource = session.resource("s3", **self._client_args())
                obj = s3_resource.Object(self._bucket, self._key)
                obj.load()
            except Exception as err:
                if isinstance(err, ClientError):
                    if err.response["Error"]["Code"] in ACCESS_DENIED_CODES:
                        self._handle_boto_error(err, "read")
                raise ResourceNotFoundError(
                    f"{self.description} does not exist (attempted read, got {err!r})"
                ) from err
        return obj

    def content_length(self) -> int:
        """Returns the size of the object"""
        return self._load_object().content_length

    def last_modified(self) -> dt.datetime:
        """Returns the modification time of the object"""
        return self._load_object().last_modified.astimezone(dt.timezone.utc)

    def get_url(self) -> URI:
        return build_s3_uri(scheme=self._scheme, bucket=self._bucket, key=self._key)

    def get_uri(self) -> URI:
        return self.get_url()

    def create_relative(self, relative_path: str) -> "S3Resource":
        """Resolve the relative path against the 'directory' of this object's key,
        within the same bucket.

        """
        key = apply_relative_path(self._key, relative_path)
        if key == ".." or key.startswith("../"):
            raise ResolutionError(
                f"Unable to resolve {relative_path!r} against {self.description}, "
                + "the key would be outside of the bucket"
            )
        return type(self)(self._bucket, key, self._scheme)

    @property
    def filename(self) -> Optional[str]:
        return get_last_segment(self._key)

    @property
    def description(self) -> str:
        return f"S3 object [{self.get_url()}]"

    def is_writable(self) -> bool:
        return self._names_object()

    def put_byte_stream(self, byte_stream: IO[bytes]):
        """Uploads a byte stream as the content of the object"""
        LOGGER.debug("Writing to %s", self.description)
        with get_session(_session_pool) as session:
            try:
                client = session.client("s3", **self._client_args())
                client.upload_fileobj(byte_stream, self._bucket, self._key)
            except Exception as err:
                self._handle_boto_error(err, "write")

