"""User registry persisted to users.txt."""

from __future__ import annotations

from typing import List, Optional, Sequence

from core.exceptions import RecordFormatError
from models.user import User
from persistence.base import FileBackedRegistry
from logging_config import get_logger


logger = get_logger(__name__)


class UserRegistry(FileBackedRegistry[User]):
    """Users keyed by username. Credentials are kept elsewhere."""

    FILENAME = "users.txt"
    TITLE = "User Data Export"
    FORMAT_SPEC = "username|email|role"
    MIN_FIELDS = 3

    def key_of(self, entity: User) -> str:
        return entity.username

    def validate(self, entity: User) -> bool:
        return self.validate_user(entity)

    def serialize(self, entity: User) -> Sequence[object]:
        return [entity.username, entity.email, entity.role]

    def deserialize(self, fields: List[str], line: str) -> User:
        if not fields[0].strip():
            raise RecordFormatError(line, "username is empty")
        return User(username=fields[0], email=fields[1], role=fields[2])

    def get_by_username(self, username: Optional[str]) -> Optional[User]:
        if username is None:
            return None
        return self.get(username)

    def get_by_role(self, role: str) -> List[User]:
        wanted = (role or "").strip().lower()
        return [u for u in self.get_all() if (u.role or "").strip().lower() == wanted]

    @staticmethod
    def validate_user(user: Optional[User]) -> bool:
        """Non-blank username and role, and an email containing '@'."""
        if user is None:
            return False
        if not user.username or not user.username.strip():
            logger.warning("Username cannot be empty")
            return False
        if not user.email or not user.email.strip() or "@" not in user.email:
            logger.warning(f"Invalid email for user {user.username}: {user.email!r}")
            return False
        if not user.role or not user.role.strip():
            logger.warning(f"Role cannot be empty for user {user.username}")
            return False
        return True
