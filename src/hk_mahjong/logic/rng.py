"""
Random number generation for wall shuffling and AI jitter.

Seeds are free-form strings. Each hand derives its own generator via
SHA512 with domain separation, so a (seed, hand_number) pair always yields
the same wall while different hands of one game stay independent:

    SHA512(_WALL_DOMAIN_PREFIX + seed + hand_number) -> random.Random

AI seats get a separate stream (_AI_DOMAIN_PREFIX) so that AI randomness
never shifts the wall order.
"""

import hashlib
import random
import secrets

SEED_BYTES = 32
RNG_VERSION = "sha512-mt-v1"
_WALL_DOMAIN_PREFIX = b"hk-mahjong-wall-v1:"
_AI_DOMAIN_PREFIX = b"hk-mahjong-ai-v1:"
_MAX_HAND_NUMBER = 2**32


def generate_seed() -> str:
    """Generate a cryptographic seed as a hex string."""
    return secrets.token_bytes(SEED_BYTES).hex()


def _derive_rng(domain_prefix: bytes, seed: str, index: int) -> random.Random:
    if not (0 <= index < _MAX_HAND_NUMBER):
        raise ValueError(f"index must be in [0, {_MAX_HAND_NUMBER})")
    digest = hashlib.sha512(domain_prefix + seed.encode() + index.to_bytes(4, byteorder="little")).digest()
    return random.Random(int.from_bytes(digest, byteorder="little"))  # noqa: S311


def create_hand_rng(seed: str, hand_number: int) -> random.Random:
    """Create the generator that shuffles the wall for one hand."""
    return _derive_rng(_WALL_DOMAIN_PREFIX, seed, hand_number)


def create_ai_rng(seed: str | None, hand_number: int) -> random.Random:
    """
    Create the generator AI seats use for jitter and claim coin flips.

    An unseeded game gets an unseeded generator.
    """
    if seed is None:
        return random.Random()  # noqa: S311
    return _derive_rng(_AI_DOMAIN_PREFIX, seed, hand_number)
