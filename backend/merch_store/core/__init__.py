"""Core Layer — domain types, errors, contracts and pure rules. No IO, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Functions here are pure and deterministic (password hashing aside: salt is random)

Design Decisions:
    - Functional core separated from imperative shell: services/ orchestrate the
      async persistence calls around the rules defined here
"""
