"""Global test fixtures."""

# pylint: disable=redefined-outer-name
import importlib
import sys
import tempfile
import zipfile
from functools import partial
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from threading import Thread
from typing import Iterator, Tuple
from uuid import uuid4

import boto3
import pytest
from moto import mock_aws

from resio.settings import get_settings

PACKAGE_FILES = {
    "__init__.py": "",
    "data/greeting.txt": "Hello, world!",
    "data/nested/config.txt": "key=value\n",
    "other.txt": "Another file",
}
"""The files in the temporary packages used to test embedded resources."""


@pytest.fixture(scope="function", autouse=True)
def settings_from_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Ensure settings are read from a clean environment for each test."""
    monkeypatch.delenv("S3_HOST", raising=False)
    get_settings.cache_clear()
    yield None
    get_settings.cache_clear()


@pytest.fixture(scope="function")
def temp_dir() -> Iterator[Path]:
    """A fixture providing a temporary directory."""
    with tempfile.TemporaryDirectory() as temp_dir_str:
        yield Path(temp_dir_str)


@pytest.fixture(scope="function")
def temp_prefix() -> Iterator[str]:
    """A fixture providing a temporary directory as a URI."""
    with tempfile.TemporaryDirectory() as temp_dir_str:
        temp_dir_path = Path(temp_dir_str)
        yield temp_dir_path.as_uri()
        # So shutil doesn't complain if we remove the path ourselves.
        temp_dir_path.mkdir(exist_ok=True)


@pytest.fixture(scope="function")
def aws_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    """Fake AWS credentials, so nothing can reach a real account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "eu-west-2")


@pytest.fixture(scope="function")
def temp_s3_prefix(aws_credentials) -> Iterator[str]:  # pylint: disable=unused-argument
    """A fixture providing a temporary S3 prefix as a URI."""
    bucket_name = uuid4().hex

    with mock_aws():
        connection = boto3.resource("s3", region_name="eu-west-2")
        bucket = connection.Bucket(bucket_name)
        bucket.create(CreateBucketConfiguration={"LocationConstraint": "eu-west-2"})
        yield f"s3://{bucket_name}"

        for obj in bucket.objects.filter(Prefix=""):
            obj.delete()


class _QuietHandler(SimpleHTTPRequestHandler):
    """A request handler which doesn't write every request to stderr."""

    def log_message(self, format, *args):  # pylint: disable=redefined-builtin
        pass


@pytest.fixture(scope="function")
def http_server(temp_dir: Path) -> Iterator[Tuple[str, Path]]:
    """A local HTTP server serving a temporary directory. Yields the base URL
    (with a trailing slash) and the directory.

    """
    handler = partial(_QuietHandler, directory=str(temp_dir))
    server = ThreadingHTTPServer(("127.0.0.1", 0), handler)
    thread = Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        host, port = server.server_address[:2]
        yield f"http://{host}:{port}/", temp_dir
    finally:
        server.shutdown()
        server.server_close()
        thread.join()


def _forget_package(package_name: str):
    """Remove a package (and its submodules) from the import system."""
    for module_name in list(sys.modules):
        if module_name == package_name or module_name.startswith(package_name + "."):
            del sys.modules[module_name]
    importlib.invalidate_caches()


@pytest.fixture(scope="function")
def embedded_package(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[str]:
    """An importable package, installed as a directory. Yields the package name."""
    package_name = f"pkg_{uuid4().hex}"
    for file_path, content in PACKAGE_FILES.items():
        path = temp_dir.joinpath(package_name, file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)

    monkeypatch.syspath_prepend(str(temp_dir))
    importlib.invalidate_caches()
    yield package_name
    _forget_package(package_name)


@pytest.fixture(scope="function")
def zipped_package(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[str]:
    """An importable package, packed in a zip archive. Yields the package name."""
    package_name = f"pkg_{uuid4().hex}"
    archive_path = temp_dir.joinpath("packages.zip")
    with zipfile.ZipFile(archive_path, "w") as archive:
        for file_path, content in PACKAGE_FILES.items():
            archive.writestr(f"{package_name}/{file_path}", content)

    monkeypatch.syspath_prepend(str(archive_path))
    importlib.invalidate_caches()
    yield package_name
    _forget_package(package_name)
