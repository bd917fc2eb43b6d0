"""Random source wiring for allocation and draws."""

from __future__ import annotations

import logging
import os
import random
from typing import Optional

from dotenv import load_dotenv

from .errors import InvalidInputError

logger = logging.getLogger(__name__)

load_dotenv()

SEED_ENV_VAR = "RAFFLE_SEED"

_default_random: Optional[random.Random] = None


def _seed_from_env() -> Optional[int]:
    raw = os.getenv(SEED_ENV_VAR)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise InvalidInputError(
            f"{SEED_ENV_VAR} must be an integer, got {raw!r}"
        ) from exc


def make_random(seed: Optional[int] = None) -> random.Random:
    """Return a new random generator for shuffles and draws.

    Parameters
    ----------
    seed : Optional[int], default: None
        Explicit seed. When omitted, ``RAFFLE_SEED`` is consulted so that a
        rehearsal can be replayed; production leaves it unset and receives an
        unseeded generator.

    Returns
    -------
    random.Random
        A private generator instance; the module-level ``random`` state is
        never touched.
    """

    if seed is None:
        seed = _seed_from_env()
        if seed is not None:
            logger.warning("Using %s=%d; draws are reproducible", SEED_ENV_VAR, seed)
    return random.Random(seed)


def default_random() -> random.Random:
    """Return the process-wide generator used when callers inject none.

    Created once with :func:`make_random`, so a ``RAFFLE_SEED`` rehearsal
    replays the whole run rather than restarting the sequence on every call.
    """

    global _default_random
    if _default_random is None:
        _default_random = make_random()
    return _default_random


__all__ = ["SEED_ENV_VAR", "default_random", "make_random"]
