"""Service layer for working with resources. This basically boils down to
convenience functions which build concrete resource implementations based
on the URI scheme of a location.

"""

import datetime as dt
import platform
import warnings
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from pathlib import Path
from typing import IO, Optional, overload
from urllib.parse import urlparse

from resio.exceptions import ResolutionError, ResourceIOError, UnsupportedSchemeError
from resio.helpers import NonClosingTextIOWrapper, get_file_name
from resio.implementations import (
    BaseResource,
    EmbeddedResource,
    FileResource,
    S3Resource,
    UrlResource,
    WritableResource,
)
from resio.implementations.file import file_uri_to_local_path
from resio.loggers import ROOT_LOGGER, get_child_logger
from resio.type_hints import (
    URI,
    BinaryFileOpenMode,
    Extension,
    Filename,
    FileOpenMode,
    Location,
    Scheme,
    TextFileOpenMode,
)

_IMPLEMENTATIONS: list[type[BaseResource]] = [
    S3Resource,
    EmbeddedResource,
    UrlResource,
]
"""Supported resource implementations, checked in order. Plain file paths
(and `file://` URIs) are handled by `FileResource` directly.

"""

_SUPPORTED_SCHEMES: set[Scheme] = set().union(
    FileResource.SUPPORTED_SCHEMES, *[impl.SUPPORTED_SCHEMES for impl in _IMPLEMENTATIONS]
)
"""Supported URI schemes."""

TEXT_MODES: set[TextFileOpenMode] = {"r"}
"""Text read modes."""
BINARY_MODES: set[BinaryFileOpenMode] = {"rb", "br"}
"""Binary read modes."""

LOGGER = get_child_logger("service", ROOT_LOGGER)


def add_implementation(implementation: type[BaseResource]):
    """Add a new resource implementation. It takes priority over the existing
    implementations for the schemes it supports.

    """
    if not isinstance(implementation, type) or not issubclass(implementation, BaseResource):
        raise TypeError("Implementation must be `BaseResource` subclass")
    _IMPLEMENTATIONS.insert(0, implementation)
    _SUPPORTED_SCHEMES.update(implementation.SUPPORTED_SCHEMES)


def _get_implementation(uri: URI) -> type[BaseResource]:
    """Get the resource implementation needed for a given URI."""
    scheme = urlparse(uri).scheme.lower() or "file"
    # Local paths are resolved without a scheme, so only `FileResource` can take them.
    if scheme in FileResource.SUPPORTED_SCHEMES:
        return FileResource
    for implementation in _IMPLEMENTATIONS:
        if scheme in implementation.SUPPORTED_SCHEMES:
            return implementation

    raise UnsupportedSchemeError(f"No implementations with support for scheme {scheme!r}")


def scheme_is_supported(scheme: Scheme) -> bool:
    """Return whether a given scheme is actually supported."""
    return scheme in _SUPPORTED_SCHEMES


def is_supported(uri: URI) -> bool:
    """Return whether a given URI is actually supported."""
    try:
        _get_implementation(resolve_location(uri))
    except UnsupportedSchemeError:
        return False
    return True


def resolve_location(filename_or_url: Location) -> URI:
    """Resolve a union of filename and URI to a URI (or an absolute POSIX
    path, for local files).

    """
    if isinstance(filename_or_url, Path):
        return filename_or_url.expanduser().absolute().as_posix()

    parsed_url = urlparse(filename_or_url)
    if parsed_url.scheme == "file":  # Passed a URL as a file.
        return file_uri_to_local_path(filename_or_url).as_posix()

    if platform.system() != "Windows":
        # On Linux, a filesystem path will never present with a scheme.
        if not parsed_url.scheme:
            return resolve_location(Path(filename_or_url))
    else:  # pragma: no cover linux
        # On Windows, a filesystem path _might_ present with a scheme if it's e.g.
        # a Windows path with forward slashes (e.g. 'C:/path/to/file'). This is
        # unfortunately indistinguishable from a URI.

        # Path uses backslashes at the start of the 'URL path' or is a Windows network
        # path beginning with two backslashes.
        if parsed_url.path.startswith("\\") or filename_or_url.startswith("\\\\"):
            return resolve_location(Path(filename_or_url))

        if len(parsed_url.scheme) == 1:  # Could be URL or path.
            warnings.warn(
                "Scheme contains only a single letter, but path does not start with a "
                + "backslash. Assuming URL, but could be a Windows file path"
            )

    if parsed_url.scheme.lower() not in _SUPPORTED_SCHEMES:
        raise UnsupportedSchemeError(
            f"Unsupported scheme {parsed_url.scheme!r}, expected one of {_SUPPORTED_SCHEMES!r}"
        )
    return filename_or_url


def get_resource(location: Location) -> BaseResource:
    """Get a resource handle for a location. Local paths (and `file://` URIs)
    give a `FileResource`; other URIs are built by the first implementation
    supporting their scheme.

    """
    uri = resolve_location(location)
    implementation = _get_implementation(uri)
    if implementation is FileResource:
        return FileResource(uri)
    return implementation.from_uri(uri)


def get_writable_resource(location: Location) -> WritableResource:
    """Get a resource handle for a location, ensuring the resource is writable."""
    resource = get_resource(location)
    if not isinstance(resource, WritableResource):
        raise UnsupportedSchemeError(f"{resource.description} does not support writes")
    return resource


@overload
def open_stream(
    location: Location,
    mode: TextFileOpenMode,
    encoding: Optional[str] = None,
) -> AbstractContextManager[IO[str]]:
    pass  # pragma: no cover


@overload
def open_stream(
    location: Location,
    mode: BinaryFileOpenMode = "rb",
    encoding: None = None,
) -> AbstractContextManager[IO[bytes]]:
    pass  # pragma: no cover


@contextmanager
def open_stream(
    location: Location,
    mode: FileOpenMode = "rb",
    encoding: Optional[str] = None,
) -> Iterator[IO]:
    """Open the resource at a location for reading, returning a context manager
    over the stream. The stream is always closed when the context exits.

    """
    if mode not in TEXT_MODES | BINARY_MODES:
        raise ResourceIOError(
            f"Unsupported file mode {mode!r}, expected one of {TEXT_MODES | BINARY_MODES!r}"
        )

    resource = get_resource(location)
    with resource.open_stream() as byte_stream:
        if mode in TEXT_MODES:
            with NonClosingTextIOWrapper(byte_stream, encoding) as text_stream:  # type: ignore
                yield text_stream
        else:
            yield byte_stream


def copy_resource(source: Location, target: Location):
    """Copy the content of one resource to another (writable) resource."""
    source_resource = get_resource(source)
    target_resource = get_writable_resource(target)
    LOGGER.info("Copying %s to %s", source_resource.description, target_resource.description)
    with source_resource.open_stream() as byte_stream:
        target_resource.put_byte_stream(byte_stream)


def get_content_length(location: Location) -> int:
    """Get the size of the resource, in bytes."""
    return get_resource(location).content_length()


def get_last_modified(location: Location) -> dt.datetime:
    """Get the time the resource was last modified."""
    return get_resource(location).last_modified()


def get_resource_exists(location: Location) -> bool:
    """Check if the resource at the provided location exists."""
    try:
        resource = get_resource(location)
    except (UnsupportedSchemeError, ResolutionError):
        return False
    return resource.exists()


def get_resource_digest(location: Location, algorithm: str = "md5") -> str:
    """Get the digest (AKA checksum) of the provided resource using the specified
    hashing algorithm.

    """
    return get_resource(location).digest(algorithm)


def build_relative_uri(base_location: Location, relative_location: str) -> URI:
    """Build a uri based on a base uri and a relative location"""
    relative = get_resource(base_location).create_relative(relative_location)
    if isinstance(relative, EmbeddedResource):
        return relative.location
    return relative.get_uri()


def get_file_stem(uri: URI) -> Filename:
    """Get the file stem from a URI."""
    return get_file_name(uri).rsplit(".", 1)[0]


def get_file_suffix(uri: URI) -> Optional[Extension]:
    """Get the top level file extension from a URI."""
    try:
        _, extension = get_file_name(uri).rsplit(".", 1)
        return extension
    except ValueError:
        return None
