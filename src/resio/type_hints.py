"""Type hints for resource access."""

from pathlib import Path
from typing import Optional, Union

from typing_extensions import Literal

PathStr = str
"""A filesystem path, as a string."""
URI = str
"""A URI representing a remote or local resource."""
Filename = str
"""A string representing a filename."""
Scheme = str
"""The scheme attribute of the URI."""
Hostname = Optional[str]
"""The hostname attribute of the URI."""
URIPath = str
"""The path attribute of the URI."""
Extension = str
"""A file extension (e.g. 'csv')."""
PackageName = str
"""The dotted name of an importable package."""
TextFileOpenMode = Literal["r"]
"""A read mode for a resource in text mode."""
BinaryFileOpenMode = Literal["rb", "br"]
"""A read mode for a resource in binary mode."""
FileOpenMode = Union[TextFileOpenMode, BinaryFileOpenMode]
"""A read mode for a resource."""

Location = Union[PathStr, Path, URI]
"""
A filesystem or remote location. An annoying, difficult to resolve union
(see `resio.service.resolve_location`).

"""
