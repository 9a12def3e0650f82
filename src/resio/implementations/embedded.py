"""A resource implementation for data files embedded in Python packages.

These are located using `importlib.resources`. A package installed as an
expanded directory has real files behind its resources, while a package
imported from an archive (e.g. a zip file on `sys.path`) does not, and so its
resources have no URL or file path.

"""

import datetime as dt
import zipfile
from importlib import resources
from pathlib import Path
from typing import IO, TYPE_CHECKING, Optional
from urllib.parse import quote, unquote, urlparse

from resio.exceptions import (
    ResolutionError,
    ResourceIOError,
    ResourceNotFoundError,
    UnsupportedLocatorError,
    UnsupportedSchemeError,
)
from resio.helpers import (
    apply_relative_path,
    clean_locator,
    get_last_segment,
    timestamp_to_datetime,
)
from resio.implementations.base import LOGGER as IMPLEMENTATIONS_LOGGER
from resio.implementations.base import BaseResource
from resio.implementations.file import handle_os_error
from resio.loggers import get_child_logger
from resio.type_hints import URI, PackageName, Scheme

if TYPE_CHECKING:
    from importlib.resources.abc import Traversable

EMBEDDED_SCHEME: Scheme = "package"
"""The scheme for embedded resource URIs (`package://<package>/<path>`)."""

LOGGER = get_child_logger("embedded", IMPLEMENTATIONS_LOGGER)


class EmbeddedResource(BaseResource):
    """A resource embedded in an importable package, addressed by a
    `/`-separated path relative to the package.

    """

    SUPPORTED_SCHEMES = {EMBEDDED_SCHEME}

    def __init__(self, path: str, package: PackageName):
        if not package:
            raise ResolutionError("A package is required to locate an embedded resource")
        path = clean_locator(path.replace("\\", "/").lstrip("/"))
        if path == ".." or path.startswith("../"):
            raise ResolutionError(f"Path {path!r} is outside of package {package!r}")
        self._path = path
        self._package = package

    @classmethod
    def from_uri(cls, uri: URI) -> "EmbeddedResource":
        """Build an embedded resource from a `package://<package>/<path>` URI."""
        parse_result = urlparse(uri)
        if parse_result.scheme.lower() not in cls.SUPPORTED_SCHEMES:
            raise UnsupportedSchemeError(
                f"Embedded resources must use the {EMBEDDED_SCHEME!r} scheme, "
                + f"got {parse_result.scheme!r}"
            )
        # Use the netloc rather than the hostname, package names are case sensitive.
        return cls(unquote(parse_result.path), parse_result.netloc)

    @property
    def path(self) -> str:
        """The path of the resource, relative to the package."""
        return self._path

    @property
    def package(self) -> PackageName:
        """The name of the package containing the resource."""
        return self._package

    @property
    def location(self) -> URI:
        """The resource's `package://` URI."""
        return f"{EMBEDDED_SCHEME}://{self._package}/{quote(self._path)}"

    def _traversable(self) -> "Traversable":
        """Find the resource in its package. This will raise `ModuleNotFoundError`
        if the package cannot be imported.

        """
        traversable = resources.files(self._package)
        for part in filter(None, self._path.split("/")):
            traversable = traversable.joinpath(part)
        return traversable

    def _local_path(self) -> Optional[Path]:
        """The path to the resource on the local filesystem, or `None` if the
        package is packed in an archive.

        """
        traversable = self._traversable()
        if isinstance(traversable, Path):
            return traversable
        return None

    def exists(self) -> bool:
        try:
            traversable = self._traversable()
            return traversable.is_file() or traversable.is_dir()
        except Exception as err:  # pylint: disable=broad-except
            LOGGER.debug("Existence check failed for %s: %r", self.description, err)
            return False

    def is_readable(self) -> bool:
        try:
            return self._traversable().is_file()
        except Exception as err:  # pylint: disable=broad-except
            LOGGER.debug("Readability check failed for %s: %r", self.description, err)
            return False

    def is_file(self) -> bool:
        try:
            return self._local_path() is not None
        except Exception:  # pylint: disable=broad-except
            return False

    def open_stream(self) -> IO[bytes]:
        """Opens the embedded resource for reading as bytes"""
        try:
            traversable = self._traversable()
        except ModuleNotFoundError as err:
            raise ResourceNotFoundError(
                f"{self.description} cannot be opened, package not found"
            ) from err

        if not traversable.is_file():
            raise ResourceNotFoundError(f"{self.description} cannot be opened, it does not exist")

        LOGGER.debug("Opening %s", self.description)
        try:
            return traversable.open("rb")
        except Exception as err:  # pylint: disable=broad-except
            handle_os_error(err, self.description, "read")

    def _get_local_path_or_none(self) -> Optional[Path]:
        """Get the local path, if there is one, treating a missing package as a
        missing resource.

        """
        try:
            return self._local_path()
        except ModuleNotFoundError as err:
            raise ResourceNotFoundError(f"{self.description}: package not found") from err

    def _get_local_path(self) -> Path:
        """Get the local path, raising `UnsupportedLocatorError` if there is none."""
        local_path = self._get_local_path_or_none()
        if local_path is None:
            raise UnsupportedLocatorError(
                f"{self.description} is packed in an archive and has no file path or URL"
            )
        return local_path

    def get_url(self) -> URI:
        return self._get_local_path().as_uri()

    def get_file(self) -> Path:
        return self._get_local_path()

    def content_length(self) -> int:
        self._ensure_exists()
        local_path = self._get_local_path_or_none()
        if local_path is None:
            return super().content_length()
        try:
            return local_path.stat().st_size
        except Exception as err:  # pylint: disable=broad-except
            handle_os_error(err, self.description, "stat")

    def last_modified(self) -> dt.datetime:
        """The modification time of the file, or of the archive entry if the
        package is packed.

        """
        self._ensure_exists()
        traversable = self._traversable()
        if isinstance(traversable, Path):
            try:
                return timestamp_to_datetime(traversable.stat().st_mtime)
            except Exception as err:  # pylint: disable=broad-except
                handle_os_error(err, self.description, "stat")
        if isinstance(traversable, zipfile.Path):
            try:
                date_time = traversable.root.getinfo(traversable.at).date_time
            except KeyError as err:
                raise ResourceIOError(
                    f"{self.description} has no entry in its archive to take a time from"
                ) from err
            return dt.datetime(*date_time, tzinfo=dt.timezone.utc)
        raise UnsupportedLocatorError(
            f"Unable to determine the modification time of {self.description}"
        )

    def create_relative(self, relative_path: str) -> "EmbeddedResource":
        """Resolve the relative path against the directory of this resource,
        within the same package.

        """
        return type(self)(apply_relative_path(self._path, relative_path), self._package)

    @property
    def filename(self) -> Optional[str]:
        return get_last_segment(self._path)

    @property
    def description(self) -> str:
        return f"embedded resource [{self._package}:{self._path}]"
