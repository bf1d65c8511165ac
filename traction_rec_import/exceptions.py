class TractionRecError(Exception):
    """
    Base class for errors raised by the Traction Rec import.
    """

    pass


class TractionRecAuthError(TractionRecError):
    """
    Raised when no access token can be obtained for the Traction Rec API.
    """

    pass


class TractionRecRequestError(TractionRecError):
    """
    Raised when a Traction Rec API request fails after retries or returns a
    response that cannot be decoded.
    """

    pass


class MigrationBusyError(TractionRecError):
    """
    Raised when a migration task cannot be claimed because it is not idle.
    """

    pass


class SnapshotFormatError(TractionRecError):
    """
    Raised when a snapshot directory or one of its JSON files does not have
    the expected shape.
    """

    pass
