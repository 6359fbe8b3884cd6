"""Tests for service layer utility functions."""
import pytest

from services.utils import escape_ilike, page_offset, total_pages, visible_pages


class TestEscapeIlike:
    """Tests for escape_ilike."""

    def test__escape_ilike__plain_text_unchanged(self) -> None:
        """Text without wildcards passes through."""
        assert escape_ilike("hello world") == "hello world"

    def test__escape_ilike__escapes_wildcards(self) -> None:
        """% and _ are escaped."""
        assert escape_ilike("100%") == "100\\%"
        assert escape_ilike("snake_case") == "snake\\_case"

    def test__escape_ilike__escapes_backslash_first(self) -> None:
        """Backslashes are escaped before wildcards so they are not doubled twice."""
        assert escape_ilike("a\\%") == "a\\\\\\%"


class TestPagination:
    """Tests for offset and page count helpers."""

    def test__page_offset(self) -> None:
        """Pages are 1-indexed."""
        assert page_offset(1, 10) == 0
        assert page_offset(2, 10) == 10
        assert page_offset(3, 25) == 50

    @pytest.mark.parametrize(
        ("total", "page_size", "expected"),
        [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (15, 10, 2), (100, 7, 15)],
    )
    def test__total_pages__is_ceiling(self, total: int, page_size: int, expected: int) -> None:
        """total_pages == ceil(total / page_size)."""
        assert total_pages(total, page_size) == expected


class TestVisiblePages:
    """Tests for visible_pages."""

    def test__visible_pages__no_pages(self) -> None:
        """Nothing to render when there are no results."""
        assert visible_pages(1, 0, 7) == []

    def test__visible_pages__fewer_pages_than_window(self) -> None:
        """All pages are shown when they fit."""
        assert visible_pages(1, 3, 7) == [1, 2, 3]
        assert visible_pages(3, 7, 7) == [1, 2, 3, 4, 5, 6, 7]

    def test__visible_pages__centred_on_current(self) -> None:
        """The window is centred on the current page."""
        assert visible_pages(10, 20, 5) == [8, 9, 10, 11, 12]

    def test__visible_pages__clamped_at_start(self) -> None:
        """The window never starts before page 1."""
        assert visible_pages(1, 20, 5) == [1, 2, 3, 4, 5]
        assert visible_pages(2, 20, 5) == [1, 2, 3, 4, 5]

    def test__visible_pages__clamped_at_end(self) -> None:
        """The window never runs past the last page."""
        assert visible_pages(20, 20, 5) == [16, 17, 18, 19, 20]
        assert visible_pages(19, 20, 5) == [16, 17, 18, 19, 20]

    def test__visible_pages__even_window(self) -> None:
        """Even window sizes still hold exactly max_visible pages."""
        window = visible_pages(10, 20, 4)
        assert len(window) == 4
        assert 10 in window

    def test__visible_pages__page_beyond_last(self) -> None:
        """A page past the end shows the final window."""
        assert visible_pages(50, 20, 5) == [16, 17, 18, 19, 20]
