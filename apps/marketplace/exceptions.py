"""
Typed exceptions raised by the marketplace workflow.

Callers catch by type, never by message. Every exception carries a
machine-readable ``code`` and the HTTP ``status_code`` the JSON views answer
with.

    MarketplaceError
    +-- MarketplaceValidationError (400)
    |   +-- InvalidKindError
    |   +-- SelfDealError
    |   +-- ShiftNotEligibleError
    |   +-- TooManyPendingRequestsError
    |   +-- BadPayloadError
    +-- MarketplaceAuthorizationError (403)
    |   +-- NotOwnerError
    |   +-- NotTargetError
    |   +-- NotRequesterError
    |   +-- ForbiddenError
    +-- MarketplaceNotFoundError (404)
    |   +-- RequestNotFoundError
    |   +-- ShiftNotFoundError
    +-- StateConflictError (409)      re-fetch, then decide whether to retry
    |   +-- InvalidTransitionError
    |   |   +-- NotOpenError
    |   |   +-- NotProposedError
    |   |   +-- NotPendingApprovalError
    |   |   +-- AlreadyTerminalError
    |   +-- NoCandidateError
    |   +-- ConflictError
    |   +-- DuplicateRequestError
    +-- TransientError (503)          nothing was applied; safe to retry as-is
"""


class MarketplaceError(Exception):
    """Base class for all marketplace errors."""

    code: str = "MARKETPLACE_ERROR"
    status_code: int = 500

    def __init__(self, message: str = ""):
        self.message = message or self.__class__.__doc__.strip().splitlines()[0]
        super().__init__(self.message)

    def as_dict(self) -> dict:
        """Return the JSON error body."""
        return {"error": self.message, "code": self.code}


# ---------------------------------------------------------------------------
# Validation: bad input, no state change
# ---------------------------------------------------------------------------

class MarketplaceValidationError(MarketplaceError):
    """The request is malformed."""

    code = "VALIDATION_ERROR"
    status_code = 400


class InvalidKindError(MarketplaceValidationError):
    """Invalid request type or missing target user for SWAP."""

    code = "INVALID_KIND"


class SelfDealError(MarketplaceValidationError):
    """The requester cannot also be the candidate."""

    code = "SELF_DEAL"


class ShiftNotEligibleError(MarketplaceValidationError):
    """Only published, owned shifts can be exchanged."""

    code = "SHIFT_NOT_ELIGIBLE"


class TooManyPendingRequestsError(MarketplaceValidationError):
    """Too many unresolved requests; cancel one first."""

    code = "TOO_MANY_PENDING_REQUESTS"


class BadPayloadError(MarketplaceValidationError):
    """The request body could not be parsed."""

    code = "BAD_PAYLOAD"


# ---------------------------------------------------------------------------
# Authorization: caller may not act, no state change
# ---------------------------------------------------------------------------

class MarketplaceAuthorizationError(MarketplaceError):
    """The caller is not allowed to perform this action."""

    code = "FORBIDDEN"
    status_code = 403


class NotOwnerError(MarketplaceAuthorizationError):
    """You can only exchange your own shifts."""

    code = "NOT_OWNER"


class NotTargetError(MarketplaceAuthorizationError):
    """You are not the target of this proposal."""

    code = "NOT_TARGET"


class NotRequesterError(MarketplaceAuthorizationError):
    """You can only cancel your own requests."""

    code = "NOT_REQUESTER"


class ForbiddenError(MarketplaceAuthorizationError):
    """Missing edit_rota permission."""

    code = "FORBIDDEN"


# ---------------------------------------------------------------------------
# Not found
# ---------------------------------------------------------------------------

class MarketplaceNotFoundError(MarketplaceError):
    """The resource does not exist."""

    code = "NOT_FOUND"
    status_code = 404


class RequestNotFoundError(MarketplaceNotFoundError):
    """Exchange request not found."""

    code = "REQUEST_NOT_FOUND"


class ShiftNotFoundError(MarketplaceNotFoundError):
    """Shift not found."""

    code = "SHIFT_NOT_FOUND"


# ---------------------------------------------------------------------------
# State conflicts: the request is not (or no longer) in the right state
# ---------------------------------------------------------------------------

class StateConflictError(MarketplaceError):
    """The request's state does not allow this action."""

    code = "STATE_CONFLICT"
    status_code = 409


class InvalidTransitionError(StateConflictError):
    """This action is not valid for the request's current status."""

    code = "INVALID_TRANSITION"

    def __init__(self, message: str = "", current_status: str = None):
        self.current_status = current_status
        if current_status and not message:
            message = f"{self.__class__.__doc__.strip()} Current status: {current_status}"
        super().__init__(message)

    def as_dict(self) -> dict:
        body = super().as_dict()
        if self.current_status:
            body["status"] = str(self.current_status)
        return body


class NotOpenError(InvalidTransitionError):
    """Request is not OPEN."""

    code = "NOT_OPEN"


class NotProposedError(InvalidTransitionError):
    """Request is not PROPOSED."""

    code = "NOT_PROPOSED"


class NotPendingApprovalError(InvalidTransitionError):
    """Request is not PENDING_APPROVAL."""

    code = "NOT_PENDING_APPROVAL"


class AlreadyTerminalError(InvalidTransitionError):
    """Request has already been resolved."""

    code = "ALREADY_TERMINAL"


class NoCandidateError(StateConflictError):
    """Request has no candidate."""

    code = "NO_CANDIDATE"


class ConflictError(StateConflictError):
    """The request changed while this action was in flight; re-fetch it."""

    code = "CONFLICT"


class DuplicateRequestError(StateConflictError):
    """This shift already has an unresolved exchange request."""

    code = "DUPLICATE_REQUEST"


# ---------------------------------------------------------------------------
# Transient infrastructure failures
# ---------------------------------------------------------------------------

class TransientError(MarketplaceError):
    """The store failed mid-transition; nothing was applied. Retry the action."""

    code = "TRANSIENT"
    status_code = 503
