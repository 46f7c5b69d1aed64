import random
import uuid
from typing import Collection, Optional

MAX_ATTEMPTS = 50


def generate_member_id(existing: Collection[str], rng: Optional[random.Random] = None) -> str:
    """Short ``M12345`` style id that does not collide with ``existing``."""
    rng = rng or random.Random()
    for _ in range(MAX_ATTEMPTS):
        candidate = f"M{rng.randint(10000, 99999)}"
        if candidate not in existing:
            return candidate
    # the five digit space is crowded; fall back to a longer token
    while True:
        candidate = f"M{uuid.uuid4().hex[:10].upper()}"
        if candidate not in existing:
            return candidate


def generate_record_id(prefix: str = "a") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"
