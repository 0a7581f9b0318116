"""Repository for user accounts."""

from ..exceptions import UserNotFoundError
from ..models.user import User
from .base import BaseRepository


class UserRepository(BaseRepository[User]):
    model_class = User
    id_column = "user_id"
    not_found_error = UserNotFoundError

    def create(self, user_id: str, access_level: int, display_name: str = "Default User") -> User:
        user = User(user_id=user_id, access_level=access_level, display_name=display_name)
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user
