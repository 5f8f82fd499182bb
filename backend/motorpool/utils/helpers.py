import math
import secrets
import time
from typing import Any, Optional

from motorpool.config import settings

BASE36_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_reference_number(prefix: Optional[str] = None) -> str:
    """Human-readable reference such as ``RES-MC1Z8K2A-3F9A1C``."""
    timestamp = _to_base36(int(time.time() * 1000))
    random_part = secrets.token_hex(3).upper()
    return f"{prefix or settings.reference_number_prefix}-{timestamp}-{random_part}"


def normalize_pagination(page: Optional[int], page_size: Optional[int]) -> tuple[int, int]:
    page = max(1, page or 1)
    page_size = page_size or settings.default_page_size
    page_size = min(settings.max_page_size, max(1, page_size))
    return page, page_size


def paginated_response(items: list[Any], total: int, page: int, page_size: int) -> dict:
    total_pages = math.ceil(total / page_size) if page_size else 0
    return {
        "items": items,
        "meta": {
            "total": total,
            "page": page,
            "page_size": page_size,
            "total_pages": total_pages,
            "has_next": page < total_pages,
            "has_prev": page > 1,
        },
    }


def clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    normalized = value.strip()
    return normalized or None
