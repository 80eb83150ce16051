import asyncio
from collections.abc import Iterable, Iterator
from itertools import islice
from time import perf_counter
from typing import Any

from ledger_categorizer.core import settings
from ledger_categorizer.domain.timefmt import format_duration, format_rate
from ledger_categorizer.logger import get_logger
from ledger_categorizer.manager import CategorizerService
from ledger_categorizer.models import Transaction

logger = get_logger(__name__)


def paginate(transactions: Iterable[Transaction], page_size: int) -> Iterator[list[Transaction]]:
    iterator = iter(transactions)
    while page := list(islice(iterator, page_size)):
        yield page


class TrainingManager:
    """
    Trains a categorizer on a large batch without blocking the event loop.

    Pages are learned in a worker thread one at a time while holding the
    service model lock, so categorize and confirm calls wait between pages.
    Only one bulk run is active at a time.
    """

    def __init__(
        self,
        service: CategorizerService,
        page_size: int | None = None,
    ) -> None:
        if page_size is None:
            page_size = settings.get_env_int(
                "TRAINING_PAGE_SIZE",
                settings.DEFAULT_TRAINING_PAGE_SIZE,
                min_value=1,
            )
        if page_size < 1:
            raise ValueError(f"Page size must be positive, got {page_size}")
        self.service = service
        self.page_size = page_size
        self.lock = asyncio.Lock()
        self.pause_event = asyncio.Event()
        self.active = False
        self.seen_ids: set[int] = set()
        self.status: dict[str, Any] = {"stage": "idle", "active": False}

    def reset_state(self) -> int:
        cleared = len(self.seen_ids)
        self.seen_ids.clear()
        self.pause_event.clear()
        self.status.clear()
        self.status.update({"stage": "idle", "active": False})
        self.active = False
        return cleared

    def request_pause(self) -> bool:
        if self.active:
            self.pause_event.set()
            return True
        return False

    def get_status(self) -> dict[str, Any]:
        status = dict(self.status)
        status["active"] = self.active
        return status

    def _process_training_page(
        self,
        page: list[Transaction],
    ) -> tuple[int, int, int, float]:
        trained_count = 0
        skipped_uncategorized = 0
        skipped_duplicate = 0

        start = perf_counter()
        with self.service.model_lock:
            for transaction in page:
                if transaction.id in self.seen_ids:
                    skipped_duplicate += 1
                    continue
                if not self.service.is_trainable(transaction):
                    skipped_uncategorized += 1
                    continue

                self.service.classifier.learn(transaction)
                self.seen_ids.add(transaction.id)
                trained_count += 1

        return trained_count, skipped_uncategorized, skipped_duplicate, perf_counter() - start

    async def train_bulk(self, transactions: Iterable[Transaction]) -> dict[str, Any]:
        async with self.lock:
            return await self._train_pages(transactions)

    async def _train_pages(self, transactions: Iterable[Transaction]) -> dict[str, Any]:
        logger.info("[TRAIN] Starting bulk training...")

        trained_count = 0
        skipped_count = 0
        skipped_duplicate = 0
        total_fetched = 0
        paused = False

        self.active = True
        self.pause_event.clear()
        self.status.clear()
        self.status.update({"stage": "processing", "active": True})

        try:
            for page in paginate(transactions, self.page_size):
                if self.pause_event.is_set():
                    paused = True
                    break

                total_fetched += len(page)
                (
                    page_trained,
                    page_skipped_uncategorized,
                    page_skipped_duplicate,
                    duration,
                ) = await asyncio.to_thread(self._process_training_page, page)
                trained_count += page_trained
                skipped_count += page_skipped_uncategorized
                skipped_duplicate += page_skipped_duplicate

                logger.info(
                    "[TRAIN] Page processed in %s (%s). Skipped (already trained): %s, "
                    "Skipped (uncategorized): %s, Total trained so far: %s",
                    format_duration(duration),
                    format_rate(page_trained, duration),
                    page_skipped_duplicate,
                    page_skipped_uncategorized,
                    trained_count,
                )
                self.status.update({
                    "trained": trained_count,
                    "skipped": skipped_count,
                    "fetched": total_fetched,
                })

                # Give other tasks a chance to run between pages
                await asyncio.sleep(0)
        finally:
            self.active = False
            self.pause_event.clear()

        stage = "paused" if paused else "complete"
        logger.info(
            "[TRAIN] %s! Trained: %s, "
            "Skipped (no category): %s, "
            "Skipped (already trained): %s",
            stage.capitalize(),
            trained_count,
            skipped_count,
            skipped_duplicate,
        )
        result = {
            "status": stage,
            "trained": trained_count,
            "skipped": skipped_count,
            "skipped_duplicate": skipped_duplicate,
            "total": total_fetched,
        }
        self.status.clear()
        self.status.update({"stage": stage, **result, "active": False})
        return result
