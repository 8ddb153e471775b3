from enum import Enum

ExtraInfoType = dict[str, str | None]


class ErrorKind(str, Enum):
    """The category of a failure, used to decide how it is surfaced."""

    AUTH = "auth"
    VALIDATION = "validation"
    PROVIDER = "provider"
    PARSE = "parse"


class MomentumError(Exception):
    """An error from Git Momentum."""

    kind: ErrorKind = ErrorKind.PROVIDER

    def __init__(self, message: str, extra_info: ExtraInfoType | None = None):
        msg = message
        if extra_info:
            msg += " (" + ", ".join([f"{key}: {value}" for key, value in extra_info.items() if value is not None]) + ")"
        super().__init__(msg)


class AuthenticationRequiredError(MomentumError):
    """No token is available for an operation that requires one."""

    kind = ErrorKind.AUTH

    def __init__(self):
        super().__init__(message="A GitHub token is required. Connect with a personal access token first.")


class RepositoryNotFoundError(MomentumError):
    """A repository was requested that is not part of the session."""

    kind = ErrorKind.VALIDATION

    def __init__(self, name: str):
        super().__init__(message="The repository is not part of your repository list.", extra_info={"repository": name})


class InvalidStateError(MomentumError):
    """An operation was requested before the step it depends on ran."""

    kind = ErrorKind.VALIDATION
