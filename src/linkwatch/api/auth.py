"""HTTP Basic credential check shared by the middleware and the websocket."""

import base64
import binascii
import secrets


def credentials_match(auth_header: str, username: str, password: str) -> bool:
    """True if an ``Authorization: Basic ...`` header carries these credentials."""
    if not auth_header.startswith("Basic "):
        return False
    try:
        decoded = base64.b64decode(auth_header[6:], validate=True).decode("utf-8")
        given_user, given_password = decoded.split(":", 1)
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return False
    # Timing-safe comparison
    return secrets.compare_digest(given_user, username) and secrets.compare_digest(given_password, password)
