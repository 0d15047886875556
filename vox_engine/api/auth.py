"""Request identity extraction."""

from typing import Optional

from fastapi import Request


class HeaderAuthProvider:
    """
    Reads a verified user id from a header set by the fronting gateway.

    Credential verification happens upstream; this service trusts the
    header as-is and never sees tokens or passwords.
    """

    def __init__(self, user_header: str = "X-User-ID"):
        self.user_header = user_header

    def identity(self, request: Request) -> Optional[str]:
        """Return the user id, or None for anonymous requests."""
        user_id = request.headers.get(self.user_header, "").strip()
        return user_id or None
