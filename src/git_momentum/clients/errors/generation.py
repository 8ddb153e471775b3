from git_momentum.errors import ErrorKind, MomentumError


class GenerationError(MomentumError):
    """An error from the text generation client."""


class GenerationRequestError(GenerationError):
    """The generation service rejected or failed the request."""

    def __init__(self, action: str, message: str | None = None):
        super().__init__(message="The generation request failed.", extra_info={"action": action, "message": message})


class MalformedResponseError(GenerationError):
    """The generation service returned a structured response that does not match the requested schema."""

    kind = ErrorKind.PARSE

    def __init__(self, action: str, message: str | None = None):
        super().__init__(message="The generation service returned a malformed response.", extra_info={"action": action, "message": message})


class EmptyGenerationError(GenerationError):
    """The generation service returned no text."""

    def __init__(self, action: str, finish_reason: str | None = None):
        super().__init__(message="The generation service returned no content.", extra_info={"action": action, "finish_reason": finish_reason})
