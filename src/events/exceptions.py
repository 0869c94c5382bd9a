"""Domain errors raised by the event, registration and payment services.

The API layer maps each of them to an HTTP status code.
"""


class EventHubError(Exception):
    """Base class for domain errors carrying a user-facing message."""

    default_message = "The request could not be completed."

    def __init__(self, message: object | None = None) -> None:
        """Keep the message printable, lazy translations included."""
        super().__init__(str(message if message is not None else self.default_message))


class NotFoundError(EventHubError):
    """Raised when an event, ticket type, registration or user does not exist."""

    default_message = "Not found."


class ForbiddenOperationError(EventHubError):
    """Raised when the actor has the wrong role or does not own the resource."""

    default_message = "You are not allowed to perform this action."


class InvalidArgumentError(EventHubError):
    """Raised for malformed input such as a missing ticket type or a non-positive quantity."""

    default_message = "Invalid argument."


class InvalidStateError(EventHubError):
    """Raised when the resource is not in a state that allows the operation."""

    default_message = "This action is not allowed in the current state."


class InvalidStateTransitionError(InvalidStateError):
    """Raised for a status change outside the allowed transitions."""

    default_message = "This status change is not allowed."


class ConflictError(EventHubError):
    """Raised for duplicate registrations, double payments and exhausted inventory."""

    default_message = "The request conflicts with the current state."
