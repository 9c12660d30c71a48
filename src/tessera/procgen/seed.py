from __future__ import annotations

import hashlib
import logging
import random
from typing import Any, Optional

logger = logging.getLogger(__name__)


def derive_seed(source: str) -> int:
    """Derive a 32-bit integer seed from an arbitrary string using SHA256."""
    digest = hashlib.sha256(source.encode("utf-8")).digest()
    val = int.from_bytes(digest[:8], "big", signed=False)
    return val & 0xFFFFFFFF


def make_rng(seed: Optional[Any] = None) -> random.Random:
    """Return a dedicated Random instance; never touches the global random state.

    ints are used directly (folded to 32 bits), anything else is hashed via
    derive_seed. None gives a non-deterministic generator.
    """
    if seed is None:
        logger.debug("Creating non-deterministic RNG")
        return random.Random()
    if isinstance(seed, int) and not isinstance(seed, bool):
        value = seed & 0xFFFFFFFF
    else:
        value = derive_seed(str(seed))
    logger.debug("Creating RNG with deterministic seed=%s", value)
    return random.Random(value)
