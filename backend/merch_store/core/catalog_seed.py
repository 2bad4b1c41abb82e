"""Catalog Seed — the merchandise offered at deployment time.

Invariants:
    - Names are unique; every price is a positive integer
    - Single source of truth for the migration seed and the in-memory catalog
"""

MERCH_CATALOG: dict[str, int] = {
    "t-shirt": 80,
    "cup": 20,
    "book": 50,
    "pen": 10,
    "powerbank": 200,
    "hoody": 300,
    "umbrella": 200,
    "socks": 10,
    "wallet": 50,
    "pink-hoody": 500,
}
