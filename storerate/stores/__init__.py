"""Data stores for persistence.

Stores handle:
- PostgreSQL: engine, session lifecycle, schema helpers

No business logic in stores - that belongs in services.
"""

from storerate.stores.postgres import Base, Database, create_database

__all__ = ["Base", "Database", "create_database"]
