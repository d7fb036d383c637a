from typing import Any

from pydantic import BaseModel


class ScrollResult(BaseModel):
    """Structured output of a single scroll page or a fully-collected scroll.

    Attributes:
        result:           Points returned by the scroll, passed through unvalidated.
        status:           Backend status string (e.g. "ok").
        time:             Time taken by the backend to execute the request.
        next_page_offset: Cursor for the next page, or None when all pages
                          have been consumed. Qdrant uses integers or UUID
                          strings depending on the point id type.
        pages_fetched:    Number of scroll calls that produced this result.
        truncated:        True when do_scroll_all() stopped at its page
                          ceiling while the backend still offered a cursor.
    """

    result: list[Any]
    status: str
    time: float
    next_page_offset: str | int | None = None
    pages_fetched: int = 1
    truncated: bool = False
