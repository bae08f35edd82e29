from __future__ import annotations

from fastapi import HTTPException

from ..auth_utils import hash_password, verify_password
from ..persistence import DocumentStore
from ..repository import Repository
from ..schemas import UserRecord


class UserService:
    def __init__(self, store: DocumentStore) -> None:
        self.users = Repository(store, "users", UserRecord, label="user")

    def find_by_email(self, email: str) -> UserRecord | None:
        matches = self.users.list_where({"email": email.strip().lower()}, order_field=None, limit=1)
        return matches[0] if matches else None

    def register(self, email: str, password: str, full_name: str | None) -> UserRecord:
        if self.find_by_email(email) is not None:
            raise HTTPException(status_code=409, detail="email already registered")
        return self.users.create(
            None,
            {"email": email.strip().lower(), "fullName": full_name, "passwordHash": hash_password(password)},
        )

    def authenticate(self, email: str, password: str) -> UserRecord | None:
        user = self.find_by_email(email)
        if user is None or not verify_password(password, user.passwordHash):
            return None
        return user

    def get(self, user_id: str) -> UserRecord | None:
        return self.users.get_by_id(user_id)
