"""
Failures raised by the approvals core.

These are policy refusals, not transient faults: they are surfaced to the
caller as-is and never retried. Each carries the HTTP status the API layer
answers with.
"""


class WorkflowError(Exception):
    """Base class for every refusal raised by the services."""
    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class Unauthenticated(WorkflowError):
    """No identity could be resolved for the caller."""
    status_code = 401

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class Forbidden(WorkflowError):
    """The caller is known but lacks the required role."""
    status_code = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message)


class UserNotFound(WorkflowError):
    status_code = 404

    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class EntityNotFound(WorkflowError):
    status_code = 404


class InvalidState(WorkflowError):
    """A deletion request was already resolved."""
    status_code = 409


class LastItemProtected(WorkflowError):
    """Deleting the item would leave a required collection empty."""
    status_code = 409


class InvalidInput(WorkflowError):
    """A decision, role, entity type or date range outside its closed set."""
    status_code = 400


def parse_choice(choices, value):
    """Coerce `value` into the enum `choices`, refusing anything else with InvalidInput."""
    try:
        return choices(value)
    except ValueError:
        raise InvalidInput(f"Invalid {choices.__name__}: {value!r}") from None
