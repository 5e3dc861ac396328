"""Auth endpoints."""
import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ..auth import authenticate_user, create_access_token, get_current_user
from ..config import settings
from ..schemas import AuthUserResponse, LoginRequest, TokenResponse, User, UserCreate, UserResponse
from ..security import visible_views
from ..store import RecordStore, get_record_store
from ..use_cases.management import register_first_admin_use_case

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


def _set_no_store(response: Response) -> None:
    response.headers["Cache-Control"] = "no-store"
    response.headers["Pragma"] = "no-cache"


def _auth_user_response(user: User) -> AuthUserResponse:
    base = UserResponse.model_validate(user)
    return AuthUserResponse(**base.model_dump(), views=visible_views(user))


def _token_response(user: User) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token({"sub": user.id}),
        expires_in=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user=_auth_user_response(user),
    )


@router.post("/register-admin", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register_admin(
    payload: UserCreate,
    response: Response,
    store: RecordStore = Depends(get_record_store),
):
    """Create the first administrator account and log it in."""
    _set_no_store(response)
    user = register_first_admin_use_case(store=store, payload=payload)
    return _token_response(user)


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, response: Response, store: RecordStore = Depends(get_record_store)):
    """Login with username and password."""
    _set_no_store(response)
    username = (payload.username or "").strip()
    user = authenticate_user(store, username, payload.password)
    if user is None:
        logger.info("auth.login_failed username=%s", username.lower())
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    logger.info("auth.login user=%s", user.id)
    return _token_response(user)


@router.get("/me", response_model=AuthUserResponse)
def get_me(response: Response, current_user: User = Depends(get_current_user)):
    """Get current user info."""
    _set_no_store(response)
    return _auth_user_response(current_user)
