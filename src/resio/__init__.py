"""A uniform interface for reading resources from the local filesystem,
Python packages, URLs, S3 and memory.

"""

# ruff: noqa: F401
from resio.exceptions import (
    AlreadyConsumedError,
    ResolutionError,
    ResourceAccessError,
    ResourceIOError,
    ResourceNotFoundError,
    UnsupportedLocatorError,
    UnsupportedSchemeError,
)
from resio.helpers import NonClosingTextIOWrapper, StreamChannel, get_file_name, parse_uri
from resio.implementations import (
    BaseResource,
    EmbeddedResource,
    FileResource,
    InMemoryResource,
    InputStreamResource,
    S3Resource,
    UrlResource,
    WritableResource,
)
from resio.service import (
    add_implementation,
    build_relative_uri,
    copy_resource,
    get_content_length,
    get_file_stem,
    get_file_suffix,
    get_last_modified,
    get_resource,
    get_resource_digest,
    get_resource_exists,
    get_writable_resource,
    is_supported,
    open_stream,
    resolve_location,
    scheme_is_supported,
)
from resio.settings import ResourceSettings, get_settings

__version__ = "0.1.0"
