"""Services Layer — orchestrates store scopes around the pure rules in core/.

Invariants:
    - Services depend on Protocols (core/repository_protocols.py), never on SQLAlchemy
    - Every service receives its collaborators and logger through the constructor
"""
