"""Persistence: SQLAlchemy models, engine and the SQL record store."""
