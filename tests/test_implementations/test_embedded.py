"""Tests for resources embedded in Python packages."""

import datetime as dt
import importlib
from pathlib import Path

import pytest

from resio.exceptions import (
    ResolutionError,
    ResourceNotFoundError,
    UnsupportedLocatorError,
    UnsupportedSchemeError,
)
from resio.implementations import EmbeddedResource


def _package_dir(package_name: str) -> Path:
    """Get the directory of an imported package."""
    module = importlib.import_module(package_name)
    return Path(module.__file__).parent  # type: ignore


def test_expanded_package_resource(embedded_package: str):
    """Test a resource in a package installed as a directory."""
    resource = EmbeddedResource("data/greeting.txt", embedded_package)
    assert resource.exists()
    assert resource.is_readable()
    assert resource.is_file()
    assert resource.read_text() == "Hello, world!"
    assert resource.content_length() == 13
    assert resource.filename == "greeting.txt"

    expected_path = _package_dir(embedded_package).joinpath("data", "greeting.txt")
    assert resource.get_file() == expected_path
    assert resource.get_url() == expected_path.as_uri()
    assert resource.last_modified() == dt.datetime.fromtimestamp(
        expected_path.stat().st_mtime, tz=dt.timezone.utc
    )


def test_leading_slash_is_ignored(embedded_package: str):
    """Test that paths are always relative to the package."""
    resource = EmbeddedResource("/data/greeting.txt", embedded_package)
    assert resource.path == "data/greeting.txt"
    assert resource.read_text() == "Hello, world!"


def test_directory_exists_but_is_not_readable(embedded_package: str):
    """Test that directories within the package exist, but can't be read."""
    resource = EmbeddedResource("data", embedded_package)
    assert resource.exists()
    assert not resource.is_readable()
    with pytest.raises(ResourceNotFoundError):
        resource.open_stream()


def test_missing_resource(embedded_package: str):
    """Test that missing resources don't exist and raise on access."""
    resource = EmbeddedResource("data/missing.txt", embedded_package)
    assert not resource.exists()
    with pytest.raises(ResourceNotFoundError):
        resource.open_stream()
    with pytest.raises(ResourceNotFoundError):
        resource.content_length()
    with pytest.raises(ResourceNotFoundError):
        resource.last_modified()


def test_missing_package():
    """Test that resources in missing packages don't exist."""
    resource = EmbeddedResource("data.txt", "resio_package_which_does_not_exist")
    assert not resource.exists()
    assert not resource.is_readable()
    assert not resource.is_file()
    with pytest.raises(ResourceNotFoundError):
        resource.open_stream()
    with pytest.raises(ResourceNotFoundError):
        resource.content_length()


def test_create_relative(embedded_package: str):
    """Test that relative resources are resolved within the same package."""
    resource = EmbeddedResource("data/greeting.txt", embedded_package)

    nested = resource.create_relative("nested/config.txt")
    assert nested.package == embedded_package
    assert nested.path == "data/nested/config.txt"
    assert nested.read_text() == "key=value\n"

    other = resource.create_relative("../other.txt")
    assert other.path == "other.txt"
    assert other.read_text() == "Another file"

    with pytest.raises(ResolutionError):
        resource.create_relative("../../outside.txt")


def test_from_uri(embedded_package: str):
    """Test that embedded resources can be built from package URIs."""
    resource = EmbeddedResource.from_uri(f"package://{embedded_package}/data/greeting.txt")
    assert resource == EmbeddedResource("data/greeting.txt", embedded_package)
    assert resource.location == f"package://{embedded_package}/data/greeting.txt"

    with pytest.raises(UnsupportedSchemeError):
        EmbeddedResource.from_uri("file:///data/greeting.txt")
    with pytest.raises(ResolutionError):
        EmbeddedResource.from_uri("package:///data/greeting.txt")


def test_description(embedded_package: str):
    """Test that the description names the package and path."""
    resource = EmbeddedResource("data/greeting.txt", embedded_package)
    assert resource.description == f"embedded resource [{embedded_package}:data/greeting.txt]"


def test_packed_package_resource(zipped_package: str):
    """Test a resource in a package imported from a zip archive."""
    resource = EmbeddedResource("data/greeting.txt", zipped_package)
    assert resource.exists()
    assert resource.is_readable()
    assert not resource.is_file()
    assert resource.read_text() == "Hello, world!"
    assert resource.content_length() == 13
    assert isinstance(resource.last_modified(), dt.datetime)

    for method in (resource.get_url, resource.get_uri, resource.get_file):
        with pytest.raises(UnsupportedLocatorError):
            method()

    assert EmbeddedResource("data", zipped_package).exists()
    assert not EmbeddedResource("data/missing.txt", zipped_package).exists()
    assert resource.create_relative("../other.txt").read_text() == "Another file"
