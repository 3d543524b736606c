"""Error taxonomy for procsnap readers."""


class SnapshotError(Exception):
    """Base class for every failure a reader can report."""

    kind = "snapshot_error"

    def __init__(self, message: str, source: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.source = source


class SourceUnavailable(SnapshotError):
    """The information source could not be opened or read."""

    kind = "source_unavailable"


class ProcessNotFoundOrDenied(SnapshotError):
    """
    The per-process status source could not be opened.

    A failed open does not tell a missing process apart from a denied one,
    so both land here. ``pid_exists`` is a best-effort hint (None when not
    checked) and never changes the kind or message.
    """

    kind = "process_not_found_or_denied"

    def __init__(
        self,
        message: str,
        pid: int,
        source: str | None = None,
        pid_exists: bool | None = None,
    ) -> None:
        super().__init__(message, source)
        self.pid = pid
        self.pid_exists = pid_exists


class MalformedRecord(SnapshotError):
    """A line of an open source does not match the expected column layout."""

    kind = "malformed_record"

    def __init__(
        self,
        message: str,
        line: str,
        line_number: int | None = None,
        source: str | None = None,
    ) -> None:
        super().__init__(message, source)
        self.line = line
        self.line_number = line_number
