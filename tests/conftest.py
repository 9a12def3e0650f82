"""Configuration for pytest."""

# These need to be imported so that autouse fixtures are triggered.
from .fixtures import *  # pylint: disable=wildcard-import,unused-wildcard-import
