"""Google OAuth 2.0 adapter.

Implements OAuthProvider: builds the consent-screen URL and exchanges an
authorization code for the user's Google identity.

Endpoints:
- Authorization: https://accounts.google.com/o/oauth2/v2/auth
- Token: https://oauth2.googleapis.com/token
- Userinfo: https://www.googleapis.com/oauth2/v2/userinfo
"""

import logging
from urllib.parse import urlencode

import httpx

from domain.model.errors import OAuthError
from domain.model.user import ExternalUser

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"
GOOGLE_SCOPES = ("openid", "email", "profile")
API_TIMEOUT_SECONDS = 10.0


class GoogleOAuthProvider:
    """OAuth provider backed by Google's authorization-code flow.

    ``transport`` lets tests inject an ``httpx.MockTransport``.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_url: str,
        timeout: float = API_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.client_id = client_id
        self._client_secret = client_secret
        self.redirect_url = redirect_url
        self.timeout = timeout
        self._transport = transport

    def get_auth_url(self, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_url,
            "response_type": "code",
            "scope": " ".join(GOOGLE_SCOPES),
            "access_type": "offline",
            "prompt": "consent",
            "state": state,
        }
        return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> ExternalUser:
        """Exchange an authorization code for the Google user record.

        Raises:
            OAuthError: the token exchange or the userinfo call failed,
                or the response was missing required fields
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                token_response = await client.post(GOOGLE_TOKEN_URL, data={
                    "code": code,
                    "client_id": self.client_id,
                    "client_secret": self._client_secret,
                    "redirect_uri": self.redirect_url,
                    "grant_type": "authorization_code",
                })
                token_response.raise_for_status()
                tokens = token_response.json()
                access_token = tokens["access_token"]

                info_response = await client.get(
                    GOOGLE_USERINFO_URL,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
                info_response.raise_for_status()
                info = info_response.json()

            return ExternalUser(
                id=str(info["id"]),
                email=info["email"],
                name=info.get("name") or "",
                avatar_url=info.get("picture"),
                email_verified=bool(info.get("verified_email", False)),
                access_token=access_token,
                refresh_token=tokens.get("refresh_token"),
            )
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Google OAuth HTTP error",
                extra={"status_code": e.response.status_code, "url": str(e.request.url)},
            )
            raise OAuthError() from e
        except httpx.HTTPError as e:
            logger.warning("Google OAuth request error", extra={"error_type": type(e).__name__})
            raise OAuthError() from e
        except (KeyError, ValueError) as e:
            logger.warning("Google OAuth response malformed", extra={"error_type": type(e).__name__})
            raise OAuthError() from e
