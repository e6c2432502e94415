# server/core/security.py

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from core.errors import AuthFailed, ConfigurationError, InvalidRequest, InvalidToken, UsernameTaken
from models.user import AdminUser


logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 24

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


@dataclass(frozen=True)
class SessionIdentity:
    id: int
    username: str
    issued_at: int
    expires_at: int

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "issuedAt": self.issued_at,
            "expiresAt": self.expires_at,
        }


def account_to_dict(account: AdminUser) -> dict:
    return {
        "id": account.id,
        "username": account.username,
        "created_at": account.created_at.isoformat() if account.created_at else None,
        "updated_at": account.updated_at.isoformat() if account.updated_at else None,
    }


class CredentialService:
    """
    Password verification and stateless session tokens for admin accounts.

    Tokens are HS256 JWTs carrying the account id and username. Nothing is
    stored server-side; a token is valid while its signature checks out and
    it has not expired.
    """

    def __init__(self, secret_key: str, expire_minutes: int = ACCESS_TOKEN_EXPIRE_MINUTES):
        if not secret_key:
            raise ConfigurationError("JWT secret key is required")
        self.secret_key = secret_key
        self.expire_delta = timedelta(minutes=expire_minutes)

    def authenticate_user(self, db: Session, username: str, password: str) -> AdminUser | None:
        user = db.query(AdminUser).filter(AdminUser.username == username).first()
        if user is None:
            # Spend the same hashing time as a real check
            pwd_context.dummy_verify()
            return None
        try:
            valid = verify_password(password, user.password_hash)
        except ValueError:
            # Stored value is not a recognised hash
            valid = False
        if not valid:
            return None
        return user

    def create_access_token(self, user_id: int, username: str) -> str:
        issued = datetime.now(timezone.utc)
        expire = issued + self.expire_delta
        to_encode = {
            "id": user_id,
            "username": username,
            "iat": int(issued.timestamp()),
            "exp": int(expire.timestamp()),
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=ALGORITHM)

    def login(self, db: Session, username: str, password: str) -> dict:
        user = self.authenticate_user(db, username, password)
        if not user:
            logger.info("Failed login attempt")
            raise AuthFailed()

        token = self.create_access_token(user.id, user.username)
        return {"token": token, "user": {"id": user.id, "username": user.username}}

    def verify(self, token: str) -> SessionIdentity:
        """
        Returns the identity inside a valid token. Bad signatures, malformed
        tokens and expired tokens all raise the same InvalidToken.
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[ALGORITHM])
        except JWTError as e:
            logger.debug("Token rejected: %s", type(e).__name__)
            raise InvalidToken()

        user_id = payload.get("id")
        username = payload.get("username")
        issued_at = payload.get("iat")
        expires_at = payload.get("exp")
        if not isinstance(user_id, int) or not isinstance(username, str) or not isinstance(expires_at, int):
            raise InvalidToken()

        return SessionIdentity(
            id=user_id,
            username=username,
            issued_at=issued_at if isinstance(issued_at, int) else 0,
            expires_at=expires_at,
        )

    def create_account(self, db: Session, username: str, password: str) -> AdminUser:
        if not username or not password:
            raise InvalidRequest("Username and password are required")

        user_exists = db.query(AdminUser).filter(AdminUser.username == username).first()
        if user_exists:
            raise UsernameTaken()

        new_user = AdminUser(username=username, password_hash=get_password_hash(password))
        db.add(new_user)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise UsernameTaken()
        db.refresh(new_user)

        logger.info("Admin user created: %s", username)
        return new_user
