"""SQLAlchemy ORM models.

Models represent database tables:
- users: Accounts with a role (system_admin, user, store_owner)
- stores: Rateable stores, optionally owned by a store_owner
- ratings: One 1-5 score per (user, store)
"""

from storerate.models.user import User
from storerate.models.store import Store
from storerate.models.rating import Rating

__all__ = ["User", "Store", "Rating"]
