"""
Page/offset arithmetic shared by the listing operations.
"""

from dataclasses import dataclass

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class PageWindow:
    page: int
    page_size: int
    offset: int


def clamp_page(page: int | None, page_size: int | None) -> PageWindow:
    """
    Normalize caller-supplied paging.

    page < 1 becomes 1, page_size < 1 falls back to the default of 50,
    and page_size is capped at 100.
    """
    page = page if page is not None and page >= 1 else 1

    if page_size is None or page_size < 1:
        page_size = DEFAULT_PAGE_SIZE
    elif page_size > MAX_PAGE_SIZE:
        page_size = MAX_PAGE_SIZE

    return PageWindow(page=page, page_size=page_size, offset=(page - 1) * page_size)
