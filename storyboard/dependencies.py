"""
Dependency wiring for the FastAPI app.

`require_auth` is the auth gate: attach it to every mutating route with
`dependencies=[Depends(require_auth)]`. It runs before the handler, so a
rejected request never reaches the store or the upload directory.
"""

from fastapi import Request

from storyboard.exceptions import AuthenticationRequiredError
from storyboard.services.auth_service import SESSION_USER_KEY, auth_service


def require_auth(request: Request) -> str:
    """
    Return the logged-in username, or raise AuthenticationRequiredError
    (401 `authentication_required`) when the session is not authenticated.
    """
    if not auth_service.is_authenticated(request.session):
        raise AuthenticationRequiredError()
    return request.session.get(SESSION_USER_KEY, "")
