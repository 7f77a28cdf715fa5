"""Store adapters: in-memory and SQLAlchemy."""
