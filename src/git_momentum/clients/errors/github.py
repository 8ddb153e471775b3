from git_momentum.errors import ErrorKind, ExtraInfoType, MomentumError

GENERIC_ERROR_MESSAGE = "API Request Failed"
FALLBACK_ERROR_MESSAGE = "GitHub API error"


class ClientError(MomentumError):
    """A request error from the GitHub Momentum client."""


class RequestError(ClientError):
    """A request error from the GitHub Momentum client.

    `provider_message` holds the message GitHub returned so that callers can surface it verbatim.
    """

    action: str
    provider_message: str

    def __init__(self, action: str, message: str | None = None, extra_info: ExtraInfoType | None = None):
        if not extra_info:
            extra_info = {}
        self.action = action
        self.provider_message = message or GENERIC_ERROR_MESSAGE
        super().__init__(message="A request error occurred.", extra_info={"action": action, "message": message, **extra_info})


class AuthenticationError(RequestError):
    """GitHub rejected the token."""

    kind = ErrorKind.AUTH


class ResourceNotFoundError(RequestError):
    """A not found error from the GitHub Momentum client."""

    def __init__(self, action: str, resource: str | None = None, message: str | None = None):
        super().__init__(
            action=action,
            message=message or "The resource could not be found.",
            extra_info={"resource": resource},
        )


class ResourceTypeMismatchError(RequestError):
    """A type mismatch error from the GitHub Momentum client."""

    def __init__(self, action: str, resource: str, expected_type: str, actual_type: str):
        super().__init__(action, f"{resource}: Expected {expected_type}, got {actual_type}")


class MissingContentError(RequestError):
    """The file exists but GitHub did not return its content inline."""

    def __init__(self, action: str, resource: str):
        super().__init__(action, "The file has no inline content.", extra_info={"resource": resource})


class UndecodableContentError(RequestError):
    """The file content is not valid base64-encoded UTF-8 text."""

    def __init__(self, action: str, resource: str):
        super().__init__(action, "The file is not UTF-8 text.", extra_info={"resource": resource})
