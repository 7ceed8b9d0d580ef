"""Shared error types for clock.

Lookup and validation failures are reported to the user and never abort the
process mid-command; storage failures are fatal.
"""


class ClockError(Exception):
    """Base error for clock."""


class TimeParseError(ClockError):
    """Clock-out text is neither HH:MM nor a bare hour."""


class ClockOutBeforeClockInError(ClockError):
    """Clock-out is not strictly after the matching clock-in."""

    def __init__(self, message: str = "clock out has to be after clock in"):
        super().__init__(message)


class ClockOutAfterNextClockInError(ClockOutBeforeClockInError):
    """Clock-out would overlap a later clock-in of the same project."""

    def __init__(self, next_clock_in: str):
        super().__init__(f"clock out has to be before the next clock in at {next_clock_in}")


def _project_label(project: str | None) -> str:
    return f"project {project}" if project is not None else "no project"


class NoOpenEntryError(ClockError):
    """`out` was requested but nothing is clocked in for that project today."""

    def __init__(self, project: str | None):
        self.project = project
        super().__init__(f"no open session for {_project_label(project)} today")


class NoMatchingDayError(ClockError):
    """`break` was requested but there is no entry for that project today."""

    def __init__(self, project: str | None):
        self.project = project
        super().__init__(f"no clock-in for {_project_label(project)} today")


class AlreadyClockedInError(ClockError):
    """`in` was requested while a session for that project is still open."""

    def __init__(self, project: str | None, since: str):
        self.project = project
        super().__init__(f"already clocked in for {_project_label(project)} since {since}")


class LedgerStorageError(ClockError):
    """The ledger file could not be read, parsed or written."""

