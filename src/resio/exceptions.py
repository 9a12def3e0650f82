"""Exceptions raised when accessing resources."""


class UnsupportedSchemeError(ValueError):
    """An error raised when a URI scheme is unsupported."""


class ResourceIOError(IOError):
    """An underlying I/O failure when accessing a resource, where the failure
    is not otherwise classified.

    """


class ResourceNotFoundError(ResourceIOError):
    """The resource content is absent from its backing store."""


class ResourceAccessError(ResourceIOError):
    """Access to the resource was denied by its backing store."""


class UnsupportedLocatorError(ResourceIOError):
    """The requested locator form (URL, URI or file path) cannot be represented
    by the resource's backing store.

    """


class ResolutionError(ResourceIOError):
    """A relative resource or locator could not be resolved."""


class AlreadyConsumedError(ResourceIOError):
    """A single-use stream resource has already been opened."""
