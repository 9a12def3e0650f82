"""A resource implementation for URLs.

`file:` URLs are handled by the local filesystem, while `http:` and `https:`
URLs are dereferenced with `requests`.

"""

import datetime as dt
from email.utils import parsedate_to_datetime
from pathlib import Path
from typing import IO, Any, NoReturn, Optional
from urllib.parse import urljoin, urlparse

import requests

from resio.exceptions import (
    ResolutionError,
    ResourceAccessError,
    ResourceIOError,
    ResourceNotFoundError,
    UnsupportedSchemeError,
)
from resio.helpers import get_last_segment
from resio.implementations.base import LOGGER as IMPLEMENTATIONS_LOGGER
from resio.implementations.base import BaseResource
from resio.implementations.file import FILE_URI_SCHEMES, FileResource, file_uri_to_local_path
from resio.loggers import get_child_logger
from resio.settings import get_settings
from resio.type_hints import URI, Scheme

HTTP_SCHEMES: set[Scheme] = {"http", "https"}
"""URL schemes dereferenced over HTTP."""
NOT_FOUND_STATUSES = {404, 410}
"""HTTP statuses which indicate the resource does not exist."""
ACCESS_DENIED_STATUSES = {401, 403}
"""HTTP statuses which indicate access to the resource was denied."""
EPOCH = dt.datetime(1970, 1, 1, tzinfo=dt.timezone.utc)
"""The modification time reported when the server does not send one."""

LOGGER = get_child_logger("url", IMPLEMENTATIONS_LOGGER)


class UrlResource(BaseResource):
    """A resource located by a URL."""

    SUPPORTED_SCHEMES = HTTP_SCHEMES | FILE_URI_SCHEMES

    def __init__(self, url: URI):
        scheme = urlparse(url).scheme.lower()
        if scheme not in self.SUPPORTED_SCHEMES:
            raise UnsupportedSchemeError(
                f"Unsupported scheme {scheme!r} for URL {url!r}, "
                + f"expected one of {sorted(self.SUPPORTED_SCHEMES)!r}"
            )
        self._url = url
        self._scheme = scheme

    @classmethod
    def from_uri(cls, uri: URI) -> "UrlResource":
        return cls(uri)

    @property
    def url(self) -> URI:
        """The URL of the resource, as given."""
        return self._url

    def _file_resource(self) -> Optional[FileResource]:
        """The local file behind a `file:` URL (`None` for other schemes)."""
        if self._scheme not in FILE_URI_SCHEMES:
            return None
        return FileResource(file_uri_to_local_path(self._url))

    @staticmethod
    def _request_args() -> dict[str, Any]:
        """Keyword arguments for all HTTP requests."""
        settings = get_settings()
        return {
            "timeout": settings.http_timeout,
            "headers": {"User-Agent": settings.http_user_agent},
        }

    def _handle_http_error(
        self, err: Exception, action: str, status_code: Optional[int] = None
    ) -> NoReturn:
        """Handle an error (or bad status) from an HTTP request."""
        if status_code is None and isinstance(err, requests.HTTPError):
            if err.response is not None:
                status_code = err.response.status_code

        message = f"Unable to access {self.description} (attempted {action}, got {err!r})"
        if status_code in NOT_FOUND_STATUSES:
            raise ResourceNotFoundError(message) from err
        if status_code in ACCESS_DENIED_STATUSES:
            raise ResourceAccessError(message) from err
        raise ResourceIOError(message) from err

    def _head(self) -> requests.Response:
        """Issue a HEAD request for the URL, for its metadata.

        Any failure other than a denial of access raises `ResourceNotFoundError`,
        as `exists` is false for all of them.

        """
        try:
            response = requests.head(self._url, allow_redirects=True, **self._request_args())
            response.raise_for_status()
        except Exception as err:  # pylint: disable=broad-except
            status_code = None
            if isinstance(err, requests.HTTPError) and err.response is not None:
                status_code = err.response.status_code
            if status_code in ACCESS_DENIED_STATUSES:
                self._handle_http_error(err, "HEAD", status_code)
            raise ResourceNotFoundError(
                f"{self.description} does not exist (attempted HEAD, got {err!r})"
            ) from err
        if not 200 <= response.status_code < 300:
            raise ResourceNotFoundError(
                f"{self.description} does not exist (attempted HEAD, got {response.status_code})"
            )
        return response

    def exists(self) -> bool:
        """Checks for a successful response to a HEAD request (or for the local
        file, for `file:` URLs).

        """
        file_resource = self._file_resource()
        if file_resource is not None:
            return file_resource.exists()

        try:
            response = requests.head(self._url, allow_redirects=True, **self._request_args())
        except Exception as err:  # pylint: disable=broad-except
            LOGGER.debug("Existence check failed for %s: %r", self.description, err)
            return False
        return 200 <= response.status_code < 300

    def is_readable(self) -> bool:
        file_resource = self._file_resource()
        if file_resource is not None:
            return file_resource.is_readable()
        return self.exists()

    def is_file(self) -> bool:
        return self._scheme in FILE_URI_SCHEMES

    def open_stream(self) -> IO[bytes]:
        """Opens a stream over the body of a GET request (or the local file, for
        `file:` URLs).

        """
        file_resource = self._file_resource()
        if file_resource is not None:
            return file_resource.open_stream()

        LOGGER.debug("Requesting %s", self.description)
        try:
            response = requests.get(self._url, stream=True, **self._request_args())
        except Exception as err:  # pylint: disable=broad-except
            self._handle_http_error(err, "GET")

        if not response.ok:
            status_code = response.status_code
            response.close()
            self._handle_http_error(
                ResourceIOError(f"HTTP status {status_code} ({response.reason})"),
                "GET",
                status_code,
            )

        body: IO[bytes] = response.raw  # type: ignore
        body.decode_content = True  # type: ignore
        return body

    def get_url(self) -> URI:
        return self._url

    def get_file(self) -> Path:
        file_resource = self._file_resource()
        if file_resource is None:
            raise ResolutionError(
                f"{self.description} cannot be resolved to an absolute file path, "
                + f"it does not use a file URL scheme ({self._scheme!r})"
            )
        return file_resource.get_file()

    def content_length(self) -> int:
        """The size from the `Content-Length` header of a HEAD request. If the
        server does not send one, the body is read to count its size.

        """
        file_resource = self._file_resource()
        if file_resource is not None:
            return file_resource.content_length()

        content_length = self._head().headers.get("Content-Length")
        if content_length is not None and content_length.isdigit():
            return int(content_length)
        return super().content_length()

    def last_modified(self) -> dt.datetime:
        """The time from the `Last-Modified` header of a HEAD request, or the
        Unix epoch if the server does not send one.

        """
        file_resource = self._file_resource()
        if file_resource is not None:
            return file_resource.last_modified()

        last_modified = self._head().headers.get("Last-Modified")
        if not last_modified:
            return EPOCH
        try:
            return parsedate_to_datetime(last_modified).astimezone(dt.timezone.utc)
        except (TypeError, ValueError) as err:
            raise ResourceIOError(
                f"Invalid Last-Modified header for {self.description}: {last_modified!r}"
            ) from err

    def create_relative(self, relative_path: str) -> "UrlResource":
        """Resolve the relative path against the URL, following RFC 3986. A
        single leading slash is ignored, making the path relative to this URL's
        directory. A `#` is part of the path, not a fragment.

        """
        if relative_path.startswith("/"):
            relative_path = relative_path[1:]
        try:
            return type(self)(urljoin(self._url, relative_path.replace("#", "%23")))
        except UnsupportedSchemeError as err:
            raise ResolutionError(
                f"Unable to resolve {relative_path!r} against {self.description}"
            ) from err

    @property
    def filename(self) -> Optional[str]:
        return get_last_segment(urlparse(self._url).path)

    @property
    def description(self) -> str:
        return f"URL [{self._url}]"
