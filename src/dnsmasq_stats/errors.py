"""Error taxonomy for a collection cycle.

Every failure during a cycle is fatal to that cycle; callers catch
CollectionError to decide the exit status and let the external scheduler
retry on its next tick.
"""

from __future__ import annotations


class CollectionError(Exception):
    """Brief: Base class for errors that abort a collection cycle."""


class HostLookupError(CollectionError):
    """Brief: The local host name could not be determined."""


class TransportError(CollectionError):
    """
    Brief: A statistics query could not be exchanged with the resolver.

    Inputs:
      - message: description (timeout, refused connection, malformed reply)

    Outputs:
      - Exception instance
    """


class ParseError(CollectionError, ValueError):
    """Brief: A statistics TXT record did not have the expected shape."""


class SinkError(CollectionError):
    """Brief: The metrics sink rejected or failed to deliver a measurement."""
