"""Exceptions raised by the bfav core."""


class BfavError(Exception):
    """Base class for all bfav errors."""


class EmptyInputError(BfavError):
    """The bookmark export contains no anchors at all."""

    def __init__(self, message: str = "No bookmarks found in the input file"):
        super().__init__(message)


class NoQualifyingLinksError(BfavError):
    """Anchors were found, but none of them points at an http(s) URL."""

    def __init__(self, message: str = "No http(s) bookmarks found in the input file"):
        super().__init__(message)
