from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List


@dataclass
class User:
    id: str = ""
    username: str = ""
    password_hash: str = ""
    email: str = ""


class UserStorage(ABC):
    """Persistence port for users; handlers only talk to this interface."""

    @abstractmethod
    def create(self, user: User) -> str:
        """Insert `user` and return the store-assigned id."""

    @abstractmethod
    def find_one(self, user_id: str) -> User:
        ...

    @abstractmethod
    def find_all(self) -> List[User]:
        ...

    @abstractmethod
    def update(self, user: User) -> None:
        """Replace every non-identifier field of the stored user `user.id`."""

    @abstractmethod
    def partial_update(self, user_id: str, fields: Dict[str, Any]) -> None:
        """Set only the given fields, keyed by User attribute name."""

    @abstractmethod
    def delete(self, user_id: str) -> None:
        ...
