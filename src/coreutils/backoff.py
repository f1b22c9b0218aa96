import random
from typing import Optional

DEFAULT_BASE_MS = 250
DEFAULT_CAP_MS = 4000


def compute_wait_ms(
    attempt: int,
    base_ms: float = DEFAULT_BASE_MS,
    cap_ms: float = DEFAULT_CAP_MS,
    rng: Optional[random.Random] = None,
) -> float:
    """Jittered exponential backoff in milliseconds.

    The ceiling doubles per attempt (``base_ms * 2**(attempt - 1)``) up to
    ``cap_ms``; the returned wait is drawn uniformly from ``[ceiling/2, ceiling)``.

    Args:
        attempt: 1-based attempt number that just failed
        base_ms: Ceiling for the first attempt
        cap_ms: Upper bound for the ceiling
        rng: Optional random source (module-level ``random`` when omitted)

    Returns:
        float: Wait duration in milliseconds
    """
    if attempt < 1:
        raise ValueError(f"attempt must be >= 1, got {attempt}")

    ceiling = min(cap_ms, base_ms * 2 ** (attempt - 1))
    draw = (rng or random).random()
    return ceiling / 2 + draw * ceiling / 2
