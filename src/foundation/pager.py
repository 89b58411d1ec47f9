"""
Page navigation over one fetched page of a counted result set.

A Pager never queries anything: it is given the rows of the current page,
the total number of rows across all pages, the page size and the 1-based
page index, and derives navigation metadata from them. The number of rows
actually fetched is authoritative for the current page's size, so short
last pages report correct bounds.
"""
from collections.abc import Iterator
from typing import Any

from foundation.exceptions import InvalidPage, InvalidPageSize, ValidationError
from foundation.result_iterator import ResultIterator

__all__ = ['Pager']


class Pager:
    """Immutable view over (iterator, count, max_per_page, page).

    The iterator only needs a `count()` method returning the number of rows
    it holds. It is referenced, never copied or re-fetched.
    """

    __slots__ = ('_iterator', '_count', '_max_per_page', '_page')

    def __init__(self, iterator: ResultIterator, count: int, max_per_page: int,
                 page: int = 1) -> None:
        if max_per_page < 1:
            raise InvalidPageSize(f'max_per_page must be at least 1, got {max_per_page}')
        if page < 1:
            raise InvalidPage(f'page must be at least 1, got {page}')
        if count < 0:
            raise ValidationError(f'count cannot be negative, got {count}')

        self._iterator = iterator
        self._count = count
        self._max_per_page = max_per_page
        self._page = page

    def __repr__(self) -> str:
        return (f'Pager(page={self._page}/{self.get_last_page()}, '
                f'max_per_page={self._max_per_page}, count={self._count})')

    def __iter__(self) -> Iterator[Any]:
        return iter(self._iterator)

    def get_iterator(self) -> ResultIterator:
        return self._iterator

    def get_result_count(self) -> int:
        """Number of results on this page.
        """
        return self._iterator.count()

    def get_result_min(self) -> int:
        """1-based index of the first result on this page.

        Clamped to the total count, hence 0 for an empty result set.
        """
        return min(1 + self._max_per_page * (self._page - 1), self._count)

    def get_result_max(self) -> int:
        """1-based index of the last result on this page.
        """
        return (self._page - 1) * self._max_per_page + self.get_result_count()

    def get_last_page(self) -> int:
        """Index of the last page. An empty result set has one empty page.
        """
        if self._count == 0:
            return 1
        return -(-self._count // self._max_per_page)

    def get_page(self) -> int:
        return self._page

    def is_next_page(self) -> bool:
        return self._page < self.get_last_page()

    def is_previous_page(self) -> bool:
        return self._page > 1

    def get_count(self) -> int:
        """Total number of results across all pages.
        """
        return self._count

    def get_max_per_page(self) -> int:
        return self._max_per_page
