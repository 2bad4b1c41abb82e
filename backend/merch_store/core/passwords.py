"""Password Hashing — salted PBKDF2-SHA256 credential material.

Invariants:
    - Plaintext passwords are never stored or compared
    - Encoded form: "pbkdf2_sha256$<iterations>$<salt hex>$<hash hex>"
    - verify_password compares in constant time and returns False on malformed hashes

Design Decisions:
    - Iteration count stored in the hash: raising the default later keeps old hashes valid
"""

import hashlib
import hmac
import secrets

ALGORITHM = "pbkdf2_sha256"
DEFAULT_ITERATIONS = 200_000
SALT_BYTES = 16


def hash_password(password: str, iterations: int = DEFAULT_ITERATIONS) -> str:
    salt = secrets.token_bytes(SALT_BYTES)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt, iterations,
    )
    return f"{ALGORITHM}${iterations}${salt.hex()}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    try:
        algorithm, iterations, salt_hex, digest_hex = encoded.split("$")
        if algorithm != ALGORITHM:
            return False
        salt = bytes.fromhex(salt_hex)
        expected = bytes.fromhex(digest_hex)
        rounds = int(iterations)
    except ValueError:
        return False
    candidate = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt, rounds,
    )
    return hmac.compare_digest(candidate, expected)
