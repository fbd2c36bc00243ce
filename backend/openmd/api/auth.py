from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from openmd.api import deps
from openmd.models.auth import LoginRequest, RegisterRequest, TokenResponse
from openmd.storage.event_log import Event
from openmd.utils.auth_hash import hash_password, verify_password
from openmd.utils.jwt_auth import create_access_token, get_current_user

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(req: RegisterRequest):
    hpw = hash_password(req.password)  # never store plaintext
    try:
        rec = deps.users.create(req.username, req.email, hpw)
    except FileExistsError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username or email already exists")
    except ValueError:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Invalid username or email")

    deps.event_log.emit(Event(event_type="USER_REGISTERED", user_id=rec.id))
    return {"id": rec.id, "username": rec.username, "email": rec.email}


@router.post("/login", response_model=TokenResponse)
def login(req: LoginRequest):
    try:
        rec = deps.users.get_by_login(req.username)
    except ValueError:
        rec = None
    # same answer for unknown user and wrong password
    if rec is None or not verify_password(req.password, rec.hashed_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    deps.users.touch_login(rec.username)
    deps.event_log.emit(Event(event_type="USER_LOGIN", user_id=rec.id))

    token = create_access_token(subject=rec.id)
    return TokenResponse(access_token=token)


@router.get("/me")
def me(user_id: str = Depends(get_current_user)):
    rec = deps.users.get(user_id)
    if rec is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return rec.public_dict()
