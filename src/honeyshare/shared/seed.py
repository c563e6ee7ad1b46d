"""Random source initialisation: seeded for replays, OS entropy for live runs."""

from __future__ import annotations

import logging
import random

log = logging.getLogger(__name__)


def init_seed(seed: int | None = None) -> random.Random:
    """Return a dedicated Random instance.

    With an explicit *seed* the *global* ``random`` module is seeded too, so
    replays stay reproducible end to end. Without one the instance draws from
    OS entropy and the global module is left alone.
    """
    if seed is None:
        log.info("Random source: unseeded (OS entropy)")
        return random.Random()
    random.seed(seed)
    rng = random.Random(seed)
    log.info("Random seed initialised: %d", seed)
    return rng
