"""Filter proposals inferred from trigger words in a query."""

import re
from datetime import datetime, timedelta

from .models import FilterProposal
from .vocabulary import (
    ASSISTANT_ROLE_TRIGGERS,
    DATE_TRIGGERS,
    RECENT_WINDOW_DAYS,
    SUMMARY_TRIGGERS,
    USER_ROLE_TRIGGERS,
)


def _mentions(text: str, phrase: str) -> bool:
    return re.search(rf"\b{re.escape(phrase)}\b", text) is not None


def _mentions_any(text: str, phrases: tuple[str, ...]) -> bool:
    return any(_mentions(text, phrase) for phrase in phrases)


def _day_bounds(day: datetime) -> tuple[datetime, datetime]:
    start = day.replace(hour=0, minute=0, second=0, microsecond=0)
    end = day.replace(hour=23, minute=59, second=59, microsecond=0)
    return start, end


def _date_range_filter(text: str, now: datetime) -> FilterProposal:
    if _mentions(text, "today"):
        start, end = _day_bounds(now)
        name, description = "Today", "Show results from today"
    elif _mentions(text, "yesterday"):
        start, end = _day_bounds(now - timedelta(days=1))
        name, description = "Yesterday", "Show results from yesterday"
    else:
        start, end = now - timedelta(days=RECENT_WINDOW_DAYS), now
        name = "Recent"
        description = f"Show results from the last {RECENT_WINDOW_DAYS} days"

    return FilterProposal(
        name=name,
        key="dateRange",
        value={"start": start.isoformat(), "end": end.isoformat()},
        description=description,
    )


def extract_filters(query: str, now: datetime | None = None) -> list[FilterProposal]:
    """Scan a query for trigger words and propose matching filters.

    Filters are emitted in a fixed order: date range, own messages,
    assistant messages, summarized conversations. At most one date-range
    filter is produced; "today" beats "yesterday", which beats "recent".

    Args:
        query: Query text, raw or normalized
        now: Reference instant, defaults to the current local time

    Returns:
        List of filter proposals, possibly empty
    """
    text = " ".join(query.lower().split())
    if not text:
        return []

    now = now or datetime.now().astimezone()
    filters = []

    if _mentions_any(text, DATE_TRIGGERS):
        filters.append(_date_range_filter(text, now))

    if _mentions_any(text, USER_ROLE_TRIGGERS):
        filters.append(
            FilterProposal(
                name="My Messages",
                key="messageRole",
                value="user",
                description="Show only your messages",
            )
        )

    if _mentions_any(text, ASSISTANT_ROLE_TRIGGERS):
        filters.append(
            FilterProposal(
                name="AI Responses",
                key="messageRole",
                value="assistant",
                description="Show only assistant responses",
            )
        )

    if _mentions_any(text, SUMMARY_TRIGGERS):
        filters.append(
            FilterProposal(
                name="Summarized",
                key="hasSummary",
                value=True,
                description="Show only conversations with summaries",
            )
        )

    return filters
