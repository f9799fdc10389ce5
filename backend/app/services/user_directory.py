"""
In-memory user directory.

Resolves the user id carried by an access token to a user record and role.
"""

import threading
from typing import Dict, List, Optional

from backend.app.models.enums import UserRole
from backend.app.models.user import User


class UserDirectory:

    def __init__(self):
        self._lock = threading.Lock()
        self._users: Dict[str, User] = {}

    def add(self, user: User) -> User:
        with self._lock:
            self._users[user.id] = user
        return user

    def find_by_id(self, user_id: str) -> Optional[User]:
        with self._lock:
            return self._users.get(user_id)

    def find_by_email(self, email: str) -> Optional[User]:
        email = email.lower()
        with self._lock:
            return next((u for u in self._users.values() if u.email.lower() == email), None)

    def list_by_role(self, role: UserRole) -> List[User]:
        with self._lock:
            return [u for u in self._users.values() if u.role == role]

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)
