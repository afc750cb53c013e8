"""Authentication API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from app.api.deps import AUTH_COOKIE, get_db, require_auth
from app.models.user import User
from app.schemas.auth import LoginRequest, SignupRequest, TokenResponse, UserRead
from app.services.auth import (
    ACCESS_TOKEN_EXPIRE_HOURS,
    EmailAlreadyRegisteredError,
    authenticate_user,
    create_access_token,
    create_user,
)

router = APIRouter()


def _issue_token(user: User, response: Response) -> TokenResponse:
    token = create_access_token(data={"sub": str(user.id)})
    response.set_cookie(
        key=AUTH_COOKIE,
        value=token,
        httponly=True,
        samesite="lax",
        max_age=60 * 60 * ACCESS_TOKEN_EXPIRE_HOURS,
        path="/",
    )
    return TokenResponse(access_token=token)


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def signup(
    body: SignupRequest,
    response: Response,
    db: Session = Depends(get_db),
) -> TokenResponse:
    """Create an account and log it in."""
    try:
        user = create_user(db, body.email, body.password, name=body.name)
    except EmailAlreadyRegisteredError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        ) from None
    return _issue_token(user, response)


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
) -> TokenResponse:
    """Authenticate and return a JWT; also sets an httponly cookie for browsers."""
    user = authenticate_user(db, body.email, body.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    return _issue_token(user, response)


@router.post("/logout")
def logout(response: Response) -> dict:
    """Clear the authentication cookie."""
    response.delete_cookie(key=AUTH_COOKIE, path="/")
    return {"detail": "Logged out"}


@router.get("/me", response_model=UserRead)
def me(current_user: User = Depends(require_auth)) -> UserRead:
    """Return the currently authenticated user."""
    return UserRead.model_validate(current_user)
