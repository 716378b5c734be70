"""ORM models. Importing this package registers every table on Base.metadata."""

from app.models.call import Call, Category
from app.models.session import Session
from app.models.user import User

__all__ = ["Call", "Category", "Session", "User"]
