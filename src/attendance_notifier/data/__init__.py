from .database import Database
from .user_repository import UserRepository

__all__ = ["Database", "UserRepository"]
