"""Exceptions raised by luntra.

Malformed markdown is never an error; it renders as literal text. Storage
and decoding failures degrade to default values and are logged, so they
have no exception type here either.
"""


class LuntraError(Exception):
    """Base class for luntra errors."""


class UseAfterCompleteError(LuntraError, RuntimeError):
    """Raised when text is appended to a turn that has already ended."""

    def __init__(self, turn_id: str):
        super().__init__(f"Turn {turn_id} is complete; no further chunks are accepted")
        self.turn_id = turn_id


class MessageSourceError(LuntraError):
    """Raised when a message source fails part-way through a turn.

    The partial content received before the failure is kept on the turn's
    message and is also available as ``partial_content``.
    """

    def __init__(self, message: str, partial_content: str = ""):
        super().__init__(message)
        self.partial_content = partial_content
