from git_momentum.errors import InvalidStateError


class NothingGeneratedError(InvalidStateError):
    """A pull request was requested before an artifact was generated."""

    def __init__(self):
        super().__init__(message="Generate an artifact before preparing a pull request.")


class NoPullRequestDraftError(InvalidStateError):
    """A pull request was opened before its draft was previewed."""

    def __init__(self):
        super().__init__(message="Preview the pull request before opening it.")


class NoRepositorySelectedError(InvalidStateError):
    """A repository view was requested without naming or selecting a repository."""

    def __init__(self):
        super().__init__(message="Name a repository or select one from the dashboard first.")
