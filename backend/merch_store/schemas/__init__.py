"""Pydantic Schemas — request/response validation for API endpoints.

Invariants:
    - Schemas validate at the system boundary (user input, API responses)
    - Wire names follow the public API (camelCase aliases); Python attributes stay snake_case

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
