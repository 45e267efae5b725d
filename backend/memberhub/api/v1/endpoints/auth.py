"""Login and logout redirects to the identity provider."""

from fastapi import Depends
from fastapi.responses import RedirectResponse

from memberhub.api import deps
from memberhub.api.auth import IdentityProvider, MockIdentityProvider
from memberhub.api.router import TrailingSlashRouter

router = TrailingSlashRouter()


@router.get("/login")
async def login(
    identity_provider: IdentityProvider | MockIdentityProvider = Depends(
        deps.get_identity_provider
    ),
) -> RedirectResponse:
    """Redirect to the identity provider's login page."""
    return RedirectResponse(identity_provider.login_url())


@router.get("/logout")
async def logout(
    identity_provider: IdentityProvider | MockIdentityProvider = Depends(
        deps.get_identity_provider
    ),
) -> RedirectResponse:
    """Redirect to the identity provider's logout endpoint, ending its session."""
    return RedirectResponse(identity_provider.logout_url())
