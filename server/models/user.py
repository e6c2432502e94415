# server/models/user.py

from sqlalchemy import Column, Integer, String, DateTime, func
from . import Base


ADMIN_TABLE = "admin_users"
APP_USER_TABLE = "app_users"
RESERVED_TABLES = frozenset({ADMIN_TABLE, APP_USER_TABLE})

BOOTSTRAP_ADMIN_USERNAME = "admin"


# -------------------------------
# Reserved system tables
# -------------------------------

class AdminUser(Base):
    """
    Administrative accounts. These are the only identities that can log in.
    """
    __tablename__ = ADMIN_TABLE

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String, unique=True, nullable=False)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime, server_default=func.current_timestamp())
    updated_at = Column(DateTime, server_default=func.current_timestamp())


class AppUser(Base):
    """
    Default user table provided to applications built on top of the backend.
    """
    __tablename__ = APP_USER_TABLE

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String, unique=True, nullable=False)
    username = Column(String, unique=True, nullable=False)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime, server_default=func.current_timestamp())
    updated_at = Column(DateTime, server_default=func.current_timestamp())
