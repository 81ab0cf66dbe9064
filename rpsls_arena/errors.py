"""Exceptions raised by the RPSLS core.

All of them are recoverable: a rejected call leaves the session exactly as
it was, so the caller can fix its input (or reset) and carry on.
"""


class RpslsError(Exception):
    """Base class for every error the core raises."""


class InvalidMoveError(RpslsError, ValueError):
    """The submitted value is not one of the five moves."""

    def __init__(self, value):
        self.value = value
        super().__init__(
            f"Invalid move: {value!r}. Expected one of: "
            "rock, paper, scissors, lizard, spock"
        )


class NoTriesRemainingError(RpslsError):
    """The session ran out of tries and must be reset."""

    def __init__(self, max_tries: int):
        self.max_tries = max_tries
        super().__init__(f"No tries left (max {max_tries}). Reset to play again.")


class ConfigurationError(RpslsError, ValueError):
    """An option passed at configuration time is out of range or unknown."""
