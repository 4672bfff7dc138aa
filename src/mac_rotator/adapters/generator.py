"""Random MAC address generation.

Every generated address is locally administered and unicast: byte 0 is
forced to ``(byte0 | 0x02) & 0xFE``. Draws use the ``secrets`` module unless
a seeded ``random.Random`` is supplied (tests).
"""

from __future__ import annotations

__all__ = [
    "generate_mac",
    "generate_distinct_mac",
]

import random
import secrets

from mac_rotator.adapters.models import MacAddress
from mac_rotator.constants import MAX_COLLISION_RETRIES
from mac_rotator.exceptions import MacGenerationError


def _draw_bytes(rng: random.Random | None) -> bytearray:
    if rng is None:
        return bytearray(secrets.token_bytes(6))
    return bytearray(rng.randrange(256) for _ in range(6))


def generate_mac(rng: random.Random | None = None) -> MacAddress:
    """Generate a random locally-administered unicast MAC address.

    Args:
        rng: Optional random source. Defaults to the OS CSPRNG.

    Returns:
        A new MacAddress.
    """
    octets = _draw_bytes(rng)
    octets[0] = (octets[0] | 0x02) & 0xFE
    return MacAddress(bytes(octets))


def generate_distinct_mac(
    current: MacAddress | None,
    rng: random.Random | None = None,
    max_retries: int = MAX_COLLISION_RETRIES,
) -> MacAddress:
    """Generate an address that differs from the adapter's current one.

    Args:
        current: The adapter's current MAC (None skips the collision check).
        rng: Optional random source.
        max_retries: Redraws allowed after a collision.

    Returns:
        A new MacAddress not equal to ``current``.

    Raises:
        MacGenerationError: If every draw collided.
    """
    candidate = generate_mac(rng)
    retries = 0
    while current is not None and candidate == current:
        if retries >= max_retries:
            raise MacGenerationError(
                f"Generated address matched current MAC {current} on {max_retries + 1} draws"
            )
        retries += 1
        candidate = generate_mac(rng)
    return candidate
