import random
from typing import Optional


class RNG(random.Random):
    """Seedable RNG so snow fields can be reproduced in tests."""


def new_rng(seed: Optional[int] = None) -> RNG:
    rng = RNG()
    rng.seed(seed)
    return rng
