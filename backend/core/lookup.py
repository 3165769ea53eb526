import random
from typing import Iterable, Optional


def _field(item, name: str):
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def find_by_code(items: Iterable, code: str) -> Optional[object]:
    """Return the first item whose asset tag, serial number, name or id equals a scanned code."""
    code = (code or "").strip()
    if not code:
        return None
    for it in items:
        for field in ("asset_tag", "serial_number", "name", "id"):
            value = _field(it, field)
            if value is not None and str(value) == code:
                return it
    return None


def generate_asset_tag(rng: Optional[random.Random] = None) -> str:
    # 13 digits, zero padded; printed as CODE128 so the format is free-form
    rng = rng or random.SystemRandom()
    return str(rng.randrange(0, 10**13)).zfill(13)
