"""Identity provider adapter (Auth0).

Verifies bearer tokens and builds the login and logout redirect URLs. The OAuth code
exchange itself happens between the browser and Auth0; this backend only consumes the
resulting access token's claims.
"""

from typing import Any, Optional
from urllib.parse import urlencode

from fastapi_auth0 import Auth0
from jose import JWTError, jwt
from pydantic import BaseModel

from memberhub.core.config import Settings
from memberhub.core.logging import logger


class IdentityClaims(BaseModel):
    """Verified claims of the caller."""

    sub: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None
    email_verified: bool = False


class IdentityProvider:
    """Auth0-backed identity provider.

    ``fastapi_auth0.Auth0`` fetches the tenant's JWKS once at construction; tokens are
    then verified locally with python-jose.
    """

    def __init__(
        self,
        *,
        domain: str,
        audience: str,
        client_id: str,
        rule_namespace: Optional[str] = None,
        callback_url: Optional[str] = None,
        logout_redirect_url: Optional[str] = None,
        auth0: Optional[Auth0] = None,
    ):
        """Initialize the provider.

        Args:
        ----
            domain (str): The Auth0 tenant domain.
            audience (str): The API audience tokens must be issued for.
            client_id (str): The Auth0 application client id.
            rule_namespace (Optional[str]): Namespace prefix of custom claims.
            callback_url (Optional[str]): Redirect target after login.
            logout_redirect_url (Optional[str]): Redirect target after logout.
            auth0 (Optional[Auth0]): Preconfigured Auth0 client, built from domain and
                audience when omitted.

        """
        self.domain = domain
        self.client_id = client_id
        self.rule_namespace = rule_namespace
        self.callback_url = callback_url
        self.logout_redirect_url = logout_redirect_url
        self._auth0 = auth0 or Auth0(domain=domain, api_audience=audience, auto_error=False)

    def _claim(self, payload: dict[str, Any], name: str) -> Any:
        if name in payload:
            return payload[name]
        if self.rule_namespace:
            return payload.get(f"{self.rule_namespace}/{name}")
        return None

    def _rsa_key(self, token: str) -> Optional[dict[str, str]]:
        unverified_header = jwt.get_unverified_header(token)
        for key in self._auth0.jwks.get("keys", []):
            if key.get("kid") == unverified_header.get("kid"):
                return {
                    "kty": key["kty"],
                    "kid": key["kid"],
                    "use": key["use"],
                    "n": key["n"],
                    "e": key["e"],
                }
        return None

    async def verify(self, token: Optional[str]) -> Optional[IdentityClaims]:
        """Verify a bearer token and return its claims.

        Args:
        ----
            token (Optional[str]): The raw JWT, without the ``Bearer`` prefix.

        Returns:
        -------
            Optional[IdentityClaims]: The claims, or None if the token is missing or invalid.

        """
        if not token:
            return None

        try:
            rsa_key = self._rsa_key(token)
            if not rsa_key:
                logger.warning("Invalid kid header (wrong tenant or rotated public key)")
                return None

            payload = jwt.decode(
                token,
                rsa_key,
                algorithms=self._auth0.algorithms,
                audience=self._auth0.audience,
                issuer=f"https://{self.domain}/",
            )
        except JWTError as e:
            logger.warning(f"Error verifying token: {e}")
            return None

        return IdentityClaims(
            sub=payload.get("sub"),
            email=self._claim(payload, "email"),
            name=self._claim(payload, "name"),
            email_verified=bool(self._claim(payload, "email_verified")),
        )

    def login_url(self) -> str:
        """URL of the Auth0 universal login page."""
        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "scope": "openid profile email",
            "audience": self._auth0.audience,
        }
        if self.callback_url:
            params["redirect_uri"] = self.callback_url
        return f"https://{self.domain}/authorize?{urlencode(params)}"

    def logout_url(self, return_to: Optional[str] = None) -> str:
        """URL that clears the Auth0 session and returns to ``return_to``."""
        params = {"client_id": self.client_id}
        return_to = return_to or self.logout_redirect_url
        if return_to:
            params["returnTo"] = return_to
        return f"https://{self.domain}/v2/logout?{urlencode(params)}"


class MockIdentityProvider:
    """Identity provider that doesn't make network calls, for development and testing.

    Every request is treated as coming from the configured first superuser.
    """

    def __init__(self, email: str, name: str, redirect_url: str = "/"):
        """Initialize the mock with the identity it always returns."""
        self.email = email
        self.name = name
        self.redirect_url = redirect_url

    async def verify(self, token: Optional[str]) -> Optional[IdentityClaims]:
        """Always return the configured identity."""
        return IdentityClaims(
            sub="mock-user-id", email=self.email, name=self.name, email_verified=True
        )

    def login_url(self) -> str:
        """Login is a no-op; go straight to the redirect target."""
        return self.redirect_url

    def logout_url(self, return_to: Optional[str] = None) -> str:
        """Logout is a no-op; go straight to the redirect target."""
        return return_to or self.redirect_url


def build_identity_provider(settings: Settings) -> IdentityProvider | MockIdentityProvider:
    """Build the identity provider configured by ``settings``."""
    if not settings.AUTH_ENABLED:
        logger.info("Using mock identity provider because AUTH_ENABLED=False")
        return MockIdentityProvider(
            email=settings.FIRST_SUPERUSER,
            name=settings.FIRST_SUPERUSER_USERNAME,
            redirect_url=settings.AUTH0_LOGOUT_REDIRECT_URL or "/",
        )

    return IdentityProvider(
        domain=settings.AUTH0_DOMAIN,
        audience=settings.AUTH0_AUDIENCE,
        client_id=settings.AUTH0_CLIENT_ID,
        rule_namespace=settings.AUTH0_RULE_NAMESPACE,
        callback_url=settings.AUTH0_CALLBACK_URL,
        logout_redirect_url=settings.AUTH0_LOGOUT_REDIRECT_URL,
    )
