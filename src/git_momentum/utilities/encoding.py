import base64


def decode_content(content: str) -> str:
    """Decode base64 file content from GitHub into text.

    GitHub wraps the base64 payload at 60 characters, so line breaks are stripped before decoding."""

    return base64.b64decode("".join(content.split())).decode("utf-8")


def encode_content(text: str) -> str:
    """Encode text as base64 for the GitHub contents API."""

    return base64.b64encode(text.encode("utf-8")).decode("ascii")
