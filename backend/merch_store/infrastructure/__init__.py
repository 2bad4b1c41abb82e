"""Infrastructure Layer — persistence adapters and cross-cutting concerns.

Invariants:
    - Implements the Protocols in core/repository_protocols.py; never the reverse
    - All SQLAlchemy exceptions mapped to PersistenceError before leaving this layer

Design Decisions:
    - SQL and in-memory adapters side by side: services are wired to either by
      constructor injection
"""
