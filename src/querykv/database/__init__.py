"""SQLite-backed record storage (SQLAlchemy)."""
