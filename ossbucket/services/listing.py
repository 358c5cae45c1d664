"""Directory-style iteration over a paginated listing API.

Pagination is a small state machine: ``Start`` fetches the first page,
``HasMore`` carries the continuation cursor to the next fetch, ``Done``
ends the walk. Each page's truncation flag drives the transition.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Union

from ossbucket.common.cancellation import Cancellation
from ossbucket.common.errors import (
    CancelledError,
    ListingFailedError,
    VisitorFailedError,
)
from ossbucket.infra.storage.client import ListingPage, ObjectStoreClient, StorageError

DIR_DELIM = "/"

logger = logging.getLogger("objstore")

Visitor = Callable[[str], None]


@dataclass(frozen=True, slots=True)
class Start:
    pass


@dataclass(frozen=True, slots=True)
class HasMore:
    cursor: str | None


@dataclass(frozen=True, slots=True)
class Done:
    pass


PageState = Union[Start, HasMore, Done]


def normalize_dir(directory: str) -> str:
    """Return ``directory`` ending in exactly one delimiter, or '' for the root."""
    if not directory:
        return ""
    return directory.rstrip(DIR_DELIM) + DIR_DELIM


def next_state(page: ListingPage) -> PageState:
    if not page.is_truncated:
        return Done()
    return HasMore(cursor=page.next_cursor)


def _cursor_of(state: PageState) -> str | None:
    if isinstance(state, HasMore):
        return state.cursor
    return None


def _visit_page(page: ListingPage, visit: Visitor) -> None:
    for key in page.objects:
        try:
            visit(key)
        except Exception as exc:
            raise VisitorFailedError(
                f"callback func invoke for object {key} failed",
                key=key,
                is_directory=False,
            ) from exc
    for prefix in page.common_prefixes:
        try:
            visit(prefix)
        except Exception as exc:
            raise VisitorFailedError(
                f"callback func invoke for directory {prefix} failed",
                key=prefix,
                is_directory=True,
            ) from exc


def iterate(
    client: ObjectStoreClient,
    directory: str,
    visit: Visitor,
    *,
    cancel: Cancellation | None = None,
) -> int:
    """Call ``visit`` for each entry directly under ``directory``.

    Not recursive: nested keys are reported once as their common prefix.
    Returns the number of pages fetched.
    """
    prefix = normalize_dir(directory)
    state: PageState = Start()
    pages = 0
    while not isinstance(state, Done):
        if cancel is not None and cancel.cancelled():
            raise CancelledError(
                f"{cancel.reason()} while iterating bucket {client.bucket}"
            )
        try:
            page = client.list_objects(
                prefix=prefix, delimiter=DIR_DELIM, cursor=_cursor_of(state)
            )
        except StorageError as exc:
            raise ListingFailedError(
                f"listing bucket {client.bucket} under {prefix!r} failed"
            ) from exc
        pages += 1
        if page.is_truncated and not page.next_cursor:
            raise ListingFailedError(
                f"listing bucket {client.bucket} under {prefix!r} reported "
                "truncation without a continuation cursor"
            )
        _visit_page(page, visit)
        state = next_state(page)
    logger.debug(
        "iterate_finished bucket=%s prefix=%s pages=%s",
        client.bucket,
        prefix,
        pages,
    )
    return pages
