"""Failure taxonomy of the circulation engine.

Every error derives from ``ValueError`` so callers that only care about
"the request could not be honoured" can keep catching ``ValueError``.
The ``code`` attribute is what ends up in a failed outcome and decides the
HTTP status in the controllers.
"""


class CirculationError(ValueError):
    code = "circulation_error"


class NotFound(CirculationError):
    """Member, book, branch, transaction or reservation does not exist."""
    code = "not_found"


class PolicyViolation(CirculationError):
    """The request is well formed but the lending rules forbid it."""
    code = "policy_violation"


class ValidationFailure(CirculationError):
    """Malformed input on entity construction."""
    code = "validation_failure"


class PersistenceFailure(CirculationError):
    """The database could not complete a read or write."""
    code = "persistence_failure"
