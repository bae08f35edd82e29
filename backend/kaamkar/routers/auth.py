from fastapi import APIRouter, Cookie, Depends, Header, HTTPException, Response

from .. import deps
from ..auth import SESSION_COOKIE_NAME, active_sessions, create_session, current_user_id, drop_session, request_token
from ..schemas import AuthResponse, LoginRequest, RegisterRequest

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=201)
def auth_register(payload: RegisterRequest, response: Response) -> AuthResponse:
    user = deps.users.register(payload.email, payload.password, payload.fullName)
    token = create_session(user.id)
    response.set_cookie(SESSION_COOKIE_NAME, token, httponly=True, samesite="lax", secure=False)
    return AuthResponse(token=token, userId=user.id, email=user.email, fullName=user.fullName)


@router.post("/login", response_model=AuthResponse)
def auth_login(payload: LoginRequest, response: Response) -> AuthResponse:
    user = deps.users.authenticate(payload.email, payload.password)
    if user is None:
        raise HTTPException(status_code=401, detail="invalid email or password")
    token = create_session(user.id)
    if payload.rememberMe:
        response.set_cookie(SESSION_COOKIE_NAME, token, httponly=True, samesite="lax", secure=False, max_age=60 * 60 * 24 * 30)
    else:
        response.set_cookie(SESSION_COOKIE_NAME, token, httponly=True, samesite="lax", secure=False)
    return AuthResponse(token=token, userId=user.id, email=user.email, fullName=user.fullName)


@router.get("/me", response_model=AuthResponse)
def auth_me(
    user_id: str = Depends(current_user_id),
    authorization: str | None = Header(default=None),
    session_token: str | None = Cookie(default=None, alias=SESSION_COOKIE_NAME),
) -> AuthResponse:
    user = deps.users.get(user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="user not found")
    token = request_token(authorization, session_token)
    return AuthResponse(token=token, userId=user.id, email=user.email, fullName=user.fullName)


@router.post("/logout")
def auth_logout(
    response: Response,
    authorization: str | None = Header(default=None),
    session_token: str | None = Cookie(default=None, alias=SESSION_COOKIE_NAME),
) -> dict[str, bool]:
    token = request_token(authorization, session_token)
    if token in active_sessions:
        drop_session(token)
    response.delete_cookie(SESSION_COOKIE_NAME)
    return {"ok": True}
