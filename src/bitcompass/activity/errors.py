"""Error types for activity-log collection."""


class ActivityLogError(Exception):
    """Base error for activity-log failures."""


class NotAGitRepositoryError(ActivityLogError):
    """The requested path is not inside a git work tree."""

    def __init__(self) -> None:
        super().__init__(
            "Not a git repository. Run from a project with git or pass a valid repo path."
        )


class InvalidDateError(ActivityLogError):
    """A date argument is not a valid ``YYYY-MM-DD`` date or range."""
