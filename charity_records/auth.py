# charity_records/auth.py
import re
from typing import Optional

from fastapi import Depends, HTTPException, Request

from charity_records.schemas import Document, User
from charity_records.security import read_session_token, verify_password
from charity_records.store import DocumentStore


def normalize_username(username: str) -> str:
    """" ad-min " -> "admin": trimmed, alphanumerics only, lower case."""
    return re.sub(r"[^A-Za-z0-9]", "", (username or "").strip()).lower()


def authenticate(document: Document, username: str, password: str) -> Optional[User]:
    wanted = normalize_username(username)
    password = (password or "").strip()
    for user in document.users:
        if normalize_username(user.username) == wanted and verify_password(password, user.password):
            return user
    return None


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_current_username(request: Request) -> Optional[str]:
    token = request.cookies.get("session_token")
    if not token:
        return None
    return read_session_token(token)


def get_current_user(request: Request, store: DocumentStore = Depends(get_store)) -> Optional[User]:
    username = get_current_username(request)
    if not username:
        return None
    return store.document.get_user_by_username(username)


def require_user(user: Optional[User] = Depends(get_current_user)) -> User:
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def require_manager(user: User = Depends(require_user)) -> User:
    if user.role != "manager":
        raise HTTPException(status_code=403, detail="Access denied: managers only")
    return user
