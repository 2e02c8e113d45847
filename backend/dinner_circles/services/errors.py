"""
Matching domain errors.

Each error carries a stable ``code`` that routers forward to clients.
"""


class MatchingError(Exception):
    """Base class for expected, caller-facing matching failures."""

    code = "MATCHING_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {"code": self.code, "message": self.message}


class EventNotFound(MatchingError):
    code = "EVENT_NOT_FOUND"


class AlreadyMatched(MatchingError):
    code = "ALREADY_MATCHED"


class InsufficientPool(MatchingError):
    code = "INSUFFICIENT_POOL"


class MatchingClosed(MatchingError):
    code = "MATCHING_CLOSED"


class AlreadyOptedIn(MatchingError):
    code = "ALREADY_OPTED_IN"


class NotOptedIn(MatchingError):
    code = "NOT_OPTED_IN"


class PartnerAlreadyOptedIn(MatchingError):
    code = "PARTNER_ALREADY_OPTED_IN"


class InvalidPartner(MatchingError):
    code = "INVALID_PARTNER"


class ProfileNotFound(LookupError):
    """An opted-in user (or linked partner) has no user row. Data error, not caller error."""

    code = "PROFILE_NOT_FOUND"

    def __init__(self, user_ids):
        self.user_ids = sorted(user_ids)
        super().__init__(f"No profile found for user ids {self.user_ids}")
