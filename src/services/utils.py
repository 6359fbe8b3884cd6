"""Shared utility functions for service layer."""
import math


def escape_ilike(value: str) -> str:
    r"""
    Escape special ILIKE characters for safe use in LIKE/ILIKE patterns.

    PostgreSQL LIKE/ILIKE treats these characters specially:
    - % matches any sequence of characters
    - _ matches any single character
    - \\ is the escape character

    This function escapes them so they match literally.
    """
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def page_offset(page: int, page_size: int) -> int:
    """Row offset for a 1-indexed page."""
    return (page - 1) * page_size


def total_pages(total: int, page_size: int) -> int:
    """Number of pages needed for `total` rows (0 when there are no rows)."""
    return math.ceil(total / page_size)


def visible_pages(page: int, pages: int, max_visible: int) -> list[int]:
    """
    Page numbers to render as pagination links.

    Returns at most `max_visible` consecutive pages, centred on `page` where
    possible and clamped to 1..pages.

    Examples:
        visible_pages(1, 3, 7) -> [1, 2, 3]
        visible_pages(10, 20, 5) -> [8, 9, 10, 11, 12]
        visible_pages(20, 20, 5) -> [16, 17, 18, 19, 20]
    """
    if pages <= 0 or max_visible <= 0:
        return []
    if pages <= max_visible:
        return list(range(1, pages + 1))

    current = min(max(page, 1), pages)
    start = current - max_visible // 2
    start = max(1, min(start, pages - max_visible + 1))
    return list(range(start, start + max_visible))
