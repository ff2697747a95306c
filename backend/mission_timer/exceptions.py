"""Error taxonomy shared by the server, the timer engine and the client."""


class MissionTimerError(Exception):
    """Base class for every error raised by this package."""


class ValidationError(MissionTimerError):
    """Empty name, or a time that is not a finite non-negative number."""


class NotFoundError(MissionTimerError):
    """No leaderboard entry exists with the requested id."""


class TransportError(MissionTimerError):
    """The leaderboard could not be reached or answered unexpectedly."""


class ChannelUnavailable(MissionTimerError):
    """The real-time channel could not be connected."""


class InvalidTransition(MissionTimerError):
    """A session operation was invoked from a state that does not allow it."""
