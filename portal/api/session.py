"""Auth session context: the single bearer-token slot.

The browser persists the token in one named cookie. A request builds an
``AuthSession`` from that cookie and hands it to the ``ApiClient`` it
constructs, so no process-wide token state exists.
"""

from dataclasses import dataclass

from fastapi import Request, Response


@dataclass
class AuthSession:
    """Holds at most one bearer token."""

    token: str | None = None

    @classmethod
    def from_request(cls, request: Request, cookie_name: str) -> "AuthSession":
        """Read the token slot from the request cookie."""
        return cls(token=request.cookies.get(cookie_name) or None)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def set_token(self, token: str | None) -> None:
        """Set the slot; ``None`` or an empty string clears it."""
        self.token = token or None

    def clear(self) -> None:
        self.token = None

    def authorization_header(self) -> dict[str, str]:
        """``Authorization`` header for the current token, if any."""
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def store(
        self,
        response: Response,
        cookie_name: str,
        *,
        secure: bool = False,
        samesite: str = "lax",
    ) -> None:
        """Persist the slot on ``response``: write it, or delete it when empty."""
        if self.token:
            response.set_cookie(
                key=cookie_name,
                value=self.token,
                httponly=True,
                secure=secure,
                samesite=samesite,
                path="/",
            )
        else:
            response.delete_cookie(key=cookie_name, path="/")
