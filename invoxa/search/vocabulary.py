"""Static vocabulary tables used by the query analysis stages."""

from types import MappingProxyType

from .models import QueryCategory

# Presence-only; these carry no weight.
BUSINESS_KEYWORDS: tuple[str, ...] = (
    "invoice",
    "client",
    "payment",
    "expense",
    "report",
    "meeting",
    "project",
    "task",
    "budget",
    "contract",
    "proposal",
    "billing",
    "revenue",
    "cost",
    "deadline",
    "milestone",
    "deliverable",
    "stakeholder",
    "vendor",
    "supplier",
)

# Exact token lookups, wrong -> right.
COMMON_MISSPELLINGS = MappingProxyType(
    {
        "invioce": "invoice",
        "clinet": "client",
        "payement": "payment",
        "expence": "expense",
        "recieve": "receive",
        "seperate": "separate",
        "occured": "occurred",
        "managment": "management",
        "buisness": "business",
        "finacial": "financial",
    }
)

# Evaluated in order; first substring hit wins.
CATEGORY_KEYWORDS: tuple[tuple[QueryCategory, tuple[str, ...]], ...] = (
    (QueryCategory.INVOICE, ("invoice", "bill")),
    (QueryCategory.CLIENT, ("client", "customer")),
    (QueryCategory.EXPENSE, ("expense", "cost")),
    (QueryCategory.REPORT, ("report", "analytics")),
)

DATE_TRIGGERS: tuple[str, ...] = ("recent", "today", "yesterday")
USER_ROLE_TRIGGERS: tuple[str, ...] = ("my", "i said", "i asked")
ASSISTANT_ROLE_TRIGGERS: tuple[str, ...] = ("assistant", "ai", "aria")
SUMMARY_TRIGGERS: tuple[str, ...] = ("summary", "summarized")

RECENT_WINDOW_DAYS = 7
