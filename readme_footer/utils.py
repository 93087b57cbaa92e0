"""Small helpers for moving README content through the GitHub API."""

import base64


def encode_base64(content: str) -> str:
    """Encode text as UTF-8 and return it Base64 encoded."""
    return base64.b64encode(content.encode("utf-8")).decode("ascii")


def decode_base64(content: str) -> str:
    """
    Decode Base64 content into text.

    GitHub wraps the content of the contents API at 60 characters, so line
    breaks inside the encoded payload are ignored.
    """
    return base64.b64decode(content).decode("utf-8")
