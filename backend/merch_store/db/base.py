"""SQLAlchemy Declarative Base — shared metadata for the store's tables.

Invariants:
    - Every model inherits from Base; alembic/env.py reads Base.metadata
    - Unique, foreign-key, primary-key and index names follow NAMING_CONVENTION so
      migrations and metadata agree; CHECK constraints are always named explicitly
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)
