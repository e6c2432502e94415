# server/api/auth.py

from pydantic import BaseModel
from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from api.deps import get_credentials, get_current_user
from core.envelope import success
from core.security import CredentialService, SessionIdentity, account_to_dict
from database import get_db


router = APIRouter(prefix="/api/auth", tags=["auth"])


class Token(BaseModel):
    access_token: str
    token_type: str


class Credentials(BaseModel):
    username: str
    password: str


@router.post("/login")
def login(
    body: Credentials,
    db: Session = Depends(get_db),
    credentials: CredentialService = Depends(get_credentials),
):
    return success(credentials.login(db, body.username, body.password))


@router.post("/token", response_model=Token)
def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
    credentials: CredentialService = Depends(get_credentials),
):
    """
    OAuth2 password flow, for tools that expect the standard token response
    (e.g. the interactive API docs). Returns the same token as /login.
    """
    result = credentials.login(db, form_data.username, form_data.password)
    return {"access_token": result["token"], "token_type": "bearer"}


@router.get("/verify")
def verify(current_user: SessionIdentity = Depends(get_current_user)):
    return success({"valid": True, "user": current_user.to_dict()})


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(
    body: Credentials,
    current_user: SessionIdentity = Depends(get_current_user),
    db: Session = Depends(get_db),
    credentials: CredentialService = Depends(get_credentials),
):
    account = credentials.create_account(db, body.username, body.password)
    return success(account_to_dict(account))
