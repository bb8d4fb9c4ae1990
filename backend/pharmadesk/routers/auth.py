# pharmadesk/routers/auth.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..api.deps import get_current_user
from ..api.response import ok
from ..core.db import get_db
from ..core.security import create_access_token, verify_password
from ..models.user import User
from ..schemas.auth import LoginIn, TokenOut, UserOut

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login")
def login(payload: LoginIn, db: Session = Depends(get_db)):
    user = (
        db.query(User)
        .filter(func.lower(User.username) == payload.username.strip().lower())
        .first()
    )
    if not user or not verify_password(payload.password, user.password):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=401, detail="User inactive")

    token = create_access_token(subject=str(user.id), role=user.role)
    return ok(TokenOut(access_token=token, user=UserOut.model_validate(user)))


@router.get("/me")
def me(user: User = Depends(get_current_user)):
    return ok(UserOut.model_validate(user))
