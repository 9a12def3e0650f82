# ruff: noqa: F401
"""Implementations of resources over different backing stores."""

from .base import BaseResource, WritableResource
from .embedded import EmbeddedResource
from .file import FileResource
from .memory import InMemoryResource, InputStreamResource
from .s3 import S3Resource
from .url import UrlResource
