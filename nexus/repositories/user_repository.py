from sqlalchemy.orm import Session
from nexus.models.user import User


class UserRepository:
    """Repository for User model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_or_create_by_auth_id(self, auth_user_id: str) -> User:
        """
        Get user by auth_user_id or create if doesn't exist.

        Called on every authenticated request, so a user's first call with a
        valid JWT provisions their row.
        """
        user = self.get_by_auth_id(auth_user_id)

        if not user:
            user = User(auth_user_id=auth_user_id)
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)

        return user

    def get_by_auth_id(self, auth_user_id: str) -> User | None:
        return self.db.query(User).filter(User.auth_user_id == auth_user_id).first()

    def get_by_id(self, user_id: int) -> User | None:
        return self.db.query(User).filter(User.id == user_id).first()
