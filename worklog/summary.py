from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Hashable, Sequence

from .aggregation import category_name
from .ai import SummaryProvider
from .dates import format_summary_date
from .errors import ConfigurationError, UpstreamError, ValidationError, WorklogError
from .models import Category, WorkItem

logger = logging.getLogger(__name__)

SUMMARY_FAILED_MESSAGE = "Failed to generate summary. Please check your API key or try again."
MISSING_CREDENTIAL_MESSAGE = (
    "AI summary is unavailable: no API key is configured. "
    "Set GEMINI_API_KEY or add a key in Settings."
)

SUMMARY_INSTRUCTION = (
    "Analyze the following work log for this week.\n"
    "Provide a professional, concise summary of the key accomplishments, "
    "grouping work by category where appropriate.\n"
    "Highlight any major cases worked on."
)


def build_summary_payload(
    items: Sequence[WorkItem],
    categories: Sequence[Category],
) -> list[dict[str, str]]:
    return [
        {
            "caseId": item.case_id,
            "description": item.description,
            "category": category_name(categories, item.category_id),
            "date": format_summary_date(item.timestamp),
        }
        for item in items
    ]


def build_summary_prompt(payload: list[dict[str, Any]]) -> str:
    return (
        f"{SUMMARY_INSTRUCTION}\n\n"
        "Work Log Data:\n"
        f"{json.dumps(payload, ensure_ascii=False, indent=2)}"
    )


def request_summary(
    items: Sequence[WorkItem],
    categories: Sequence[Category],
    provider: SummaryProvider,
) -> str:
    if not items:
        raise ValidationError("There are no work items to summarize.")
    if not provider.is_configured():
        raise ConfigurationError(MISSING_CREDENTIAL_MESSAGE)

    prompt = build_summary_prompt(build_summary_payload(items, categories))
    logger.info(
        "Requesting summary of %d item(s) from %s (model=%s)",
        len(items),
        provider.name,
        provider.model,
    )
    text = provider.generate(prompt)
    if not isinstance(text, str) or not text.strip():
        raise UpstreamError("Provider returned an empty summary.")
    return text.strip()


def user_message(error: WorklogError) -> str:
    if isinstance(error, ConfigurationError):
        return str(error) or MISSING_CREDENTIAL_MESSAGE
    if isinstance(error, ValidationError):
        return str(error)
    return SUMMARY_FAILED_MESSAGE


@dataclass(frozen=True)
class SummaryOutcome:
    key: Hashable
    ticket: int
    text: str = ""
    error: WorklogError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SummaryRequester:
    """
    Runs one summary request at a time on a worker thread.

    ``submit`` refuses new work while a request is outstanding. Each accepted
    request gets a ticket; ``is_current`` tells the caller whether an outcome
    still belongs to the latest request and the window on screen.
    """

    def __init__(self, provider_factory: Callable[[], SummaryProvider]):
        self._provider_factory = provider_factory
        self._lock = threading.Lock()
        self._busy = False
        self._pending_key: Hashable | None = None
        self._ticket = 0

    @property
    def is_busy(self) -> bool:
        with self._lock:
            return self._busy

    @property
    def pending_key(self) -> Hashable | None:
        with self._lock:
            return self._pending_key

    def is_current(self, outcome: SummaryOutcome, displayed_key: Hashable | None = None) -> bool:
        """
        True when ``outcome`` answers the latest request and, if given,
        ``displayed_key`` still names the window the request was made for.
        """
        if displayed_key is not None and outcome.key != displayed_key:
            return False
        with self._lock:
            return outcome.ticket == self._ticket

    def submit(
        self,
        key: Hashable,
        items: Sequence[WorkItem],
        categories: Sequence[Category],
        on_done: Callable[[SummaryOutcome], None],
    ) -> bool:
        with self._lock:
            if self._busy:
                logger.debug("Summary request for %r ignored; one is already in flight", key)
                return False
            self._busy = True
            self._pending_key = key
            self._ticket += 1
            ticket = self._ticket

        threading.Thread(
            target=self._run,
            args=(key, ticket, list(items), list(categories), on_done),
            name="worklog-summary",
            daemon=True,
        ).start()
        return True

    def _run(
        self,
        key: Hashable,
        ticket: int,
        items: list[WorkItem],
        categories: list[Category],
        on_done: Callable[[SummaryOutcome], None],
    ) -> None:
        try:
            text = request_summary(items, categories, self._provider_factory())
            outcome = SummaryOutcome(key=key, ticket=ticket, text=text)
        except WorklogError as exc:
            logger.warning("Summary request failed: %s", exc)
            outcome = SummaryOutcome(key=key, ticket=ticket, error=exc)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected summary failure")
            outcome = SummaryOutcome(key=key, ticket=ticket, error=UpstreamError(str(exc)))
        finally:
            with self._lock:
                self._busy = False
                self._pending_key = None
        on_done(outcome)
