"""Exception hierarchy for the cube controller."""


class CubeError(Exception):
    """Base exception for all controller errors."""


class AuthError(CubeError):
    """Missing or wrong X-API-Token."""

    def __init__(self, message="unauthorized"):
        self.reason = message
        super().__init__(message)


class ParseError(CubeError):
    """Command body could not be turned into a usable update.

    ``reason`` is the short text returned to the client
    (``"invalid body"`` or ``"no valid fields"``).
    """

    def __init__(self, reason, detail=""):
        self.reason = reason
        self.detail = detail
        super().__init__(f"{reason}: {detail}" if detail else reason)


class DisplayInitError(CubeError):
    """The LED output could not be opened at startup."""
