import logging
import secrets
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse, RedirectResponse

from app.dependencies import AUTH_USER_KEY, get_oauth_client
from app.services.oauth_service import OAuthClient, OAuthError

logger = logging.getLogger(__name__)

OAUTH_STATE_KEY = "oauth_state"

router = APIRouter()

@router.get("/login")
async def login(request: Request, oauth: OAuthClient = Depends(get_oauth_client)):
    state = secrets.token_urlsafe(32)
    request.session[OAUTH_STATE_KEY] = state
    return RedirectResponse(oauth.authorization_url(state), status_code=302)

@router.get("/callback")
async def callback(
    request: Request,
    code: str = "",
    state: str = "",
    oauth: OAuthClient = Depends(get_oauth_client),
):
    expected = request.session.pop(OAUTH_STATE_KEY, None)
    if not expected or not secrets.compare_digest(state.encode(), expected.encode()):
        logger.warning("OAuth callback with invalid state")
        raise HTTPException(status_code=400, detail="invalid state")

    try:
        username = await oauth.fetch_username(code)
    except OAuthError as exc:
        if exc.status_code == 400:
            raise HTTPException(status_code=400, detail=exc.message)
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    request.session[AUTH_USER_KEY] = username
    logger.info("Logged in as %s", username)
    return RedirectResponse(request.app.state.settings.app_url, status_code=302)
