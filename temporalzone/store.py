"""Ordered in-memory key-value stores and offset/key pagination over them."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Protocol

DEFAULT_LIMIT = 100


class PaginationError(ValueError):
    """Raised when a page request is malformed."""


class _Iterable(Protocol):
    def iterate(self, prefix: bytes) -> Iterator[tuple[bytes, bytes]]: ...


class KVStore:
    """A byte-keyed store that iterates in ascending key order."""

    def __init__(self) -> None:
        self._data: dict[bytes, bytes] = {}

    def get(self, key: bytes) -> bytes | None:
        return self._data.get(bytes(key))

    def set(self, key: bytes, value: bytes) -> None:
        if not key:
            raise ValueError("key is nil")
        if value is None:
            raise ValueError("value is nil")
        self._data[bytes(key)] = bytes(value)

    def delete(self, key: bytes) -> None:
        self._data.pop(bytes(key), None)

    def iterate(self, prefix: bytes = b"") -> Iterator[tuple[bytes, bytes]]:
        """Yield (key, value) pairs whose key starts with prefix, in key order."""
        prefix = bytes(prefix)
        snapshot = sorted(item for item in self._data.items() if item[0].startswith(prefix))
        yield from snapshot

    def __len__(self) -> int:
        return len(self._data)


class PrefixStore:
    """A view of a parent store restricted to keys under a fixed prefix."""

    def __init__(self, parent: KVStore | PrefixStore, prefix: bytes) -> None:
        self.parent = parent
        self.prefix = bytes(prefix)

    def get(self, key: bytes) -> bytes | None:
        return self.parent.get(self.prefix + bytes(key))

    def set(self, key: bytes, value: bytes) -> None:
        if not key:
            raise ValueError("key is nil")
        self.parent.set(self.prefix + bytes(key), value)

    def delete(self, key: bytes) -> None:
        self.parent.delete(self.prefix + bytes(key))

    def iterate(self, prefix: bytes = b"") -> Iterator[tuple[bytes, bytes]]:
        """Yield (key, value) pairs under prefix, with this store's prefix removed."""
        cut = len(self.prefix)
        for key, value in self.parent.iterate(self.prefix + bytes(prefix)):
            yield key[cut:], value


@dataclass
class PageRequest:
    key: bytes | None = None
    offset: int = 0
    limit: int = 0
    count_total: bool = False


@dataclass
class PageResponse:
    next_key: bytes | None = None
    total: int = 0


def paginate(
    store: _Iterable,
    page_request: PageRequest | None,
    on_result: Callable[[bytes, bytes], None],
) -> PageResponse:
    """Feed one page of store entries to on_result and describe the next page."""
    request = page_request or PageRequest()
    offset, limit, key = request.offset, request.limit, request.key
    count_total = request.count_total

    if offset < 0 or limit < 0:
        raise PaginationError("offset and limit must not be negative")
    if offset > 0 and key:
        raise PaginationError("invalid request, either offset or key is expected, got both")
    if limit == 0:
        limit = DEFAULT_LIMIT
        count_total = True

    if key:
        count = 0
        for entry_key, value in store.iterate(b""):
            if entry_key < key:
                continue
            if count == limit:
                return PageResponse(next_key=entry_key)
            on_result(entry_key, value)
            count += 1
        return PageResponse()

    end = offset + limit
    count = 0
    next_key: bytes | None = None
    for entry_key, value in store.iterate(b""):
        count += 1
        if count <= offset:
            continue
        if count <= end:
            on_result(entry_key, value)
        elif count == end + 1:
            next_key = entry_key
            if not count_total:
                break
    return PageResponse(next_key=next_key, total=count if count_total else 0)