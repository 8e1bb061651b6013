"""
Application Exceptions

Collaborator failures are raised as ServiceError subclasses so the
conversation layer can answer with an apology and keep the caller's
session where it was.
"""


class ServiceError(Exception):
    """Base class for failures of an external collaborator."""


class CatalogUnavailableError(ServiceError):
    """The menu for a restaurant could not be loaded."""


class PersistenceError(ServiceError):
    """A completed order, booking, feedback or complaint could not be stored."""


class RestaurantNotFoundError(ServiceError):
    """No restaurant is mapped to the inbound routing address."""

    def __init__(self, address: str):
        self.address = address
        super().__init__(f"No restaurant mapped to {address!r}")


class SessionStateError(Exception):
    """A stored session cannot be continued by its flow (unknown step, unusable draft)."""
