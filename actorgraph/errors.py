"""Exceptions raised by the graph and suggestion services."""


class ActorGraphError(Exception):
    """Base class for all actorgraph errors."""


class NotFoundError(ActorGraphError):
    """Raised when a requested record does not exist in the given context."""


class ServiceUnavailableError(ActorGraphError):
    """Raised when the backing store is missing or closed."""


class MissingNodeError(ActorGraphError, KeyError):
    """Raised when an edge references a node that is not in the graph."""


class DuplicateEdgeError(ActorGraphError):
    """Raised when two nodes are already connected by an edge."""
