import asyncio
import time

import pytest

from ledger_categorizer.classifiers.fuzzy import FuzzyClassifier
from ledger_categorizer.confidence import ConfidencePolicy
from ledger_categorizer.manager import CategorizerService
from ledger_categorizer.models import Category, Transaction
from ledger_categorizer.services.training import TrainingManager, paginate


@pytest.fixture
def transactions(food: Category, transport: Category) -> list[Transaction]:
    return [
        Transaction(id=1, details="Starbucks Coffee", category=food),
        Transaction(id=2, details="Shell Gas", category=transport),
        Transaction(id=3, details="Salary"),
        Transaction(id=4, details="Refund", category=food, inflow=True),
        Transaction(id=5, details="Costa Coffee", category=food),
    ]


@pytest.fixture
def manager() -> TrainingManager:
    service = CategorizerService(classifier=FuzzyClassifier(), policy=ConfidencePolicy())
    return TrainingManager(service=service, page_size=2)


def test_paginate_chunks_input() -> None:
    pages = list(paginate(iter(range(5)), 2))

    assert pages == [[0, 1], [2, 3], [4]]


def test_page_size_must_be_positive() -> None:
    service = CategorizerService(classifier=FuzzyClassifier(), policy=ConfidencePolicy())
    with pytest.raises(ValueError):
        TrainingManager(service=service, page_size=0)


@pytest.mark.anyio
async def test_train_bulk(manager: TrainingManager, transactions: list[Transaction]) -> None:
    result = await manager.train_bulk(transactions)

    assert result == {
        "status": "complete",
        "trained": 3,
        "skipped": 2,
        "skipped_duplicate": 0,
        "total": 5,
    }
    assert len(manager.service.classifier.model_data) == 3
    assert manager.get_status()["stage"] == "complete"
    assert not manager.active


@pytest.mark.anyio
async def test_train_bulk_skips_already_trained(manager: TrainingManager, transactions: list[Transaction]) -> None:
    await manager.train_bulk(transactions)

    result = await manager.train_bulk(transactions)

    assert result["trained"] == 0
    assert result["skipped_duplicate"] == 3

    assert manager.reset_state() == 3
    result = await manager.train_bulk(transactions)
    assert result["trained"] == 3


def test_request_pause_needs_active_training(manager: TrainingManager) -> None:
    assert manager.request_pause() is False


@pytest.mark.anyio
async def test_pause_stops_between_pages(manager: TrainingManager, transactions: list[Transaction]) -> None:
    def pages():
        for transaction in transactions:
            if transaction.id == 3:
                manager.request_pause()
            yield transaction

    result = await manager.train_bulk(pages())

    assert result["status"] == "paused"
    assert result["total"] == 2
    assert result["trained"] == 2


def test_page_size_defaults_to_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TRAINING_PAGE_SIZE", "7")
    service = CategorizerService(classifier=FuzzyClassifier(), policy=ConfidencePolicy())

    assert TrainingManager(service=service).page_size == 7


class SlowFuzzyClassifier(FuzzyClassifier):
    def __init__(self) -> None:
        super().__init__()
        self.learning = False
        self.overlaps = 0

    def learn(self, transaction: Transaction) -> None:
        self.learning = True
        time.sleep(0.01)
        super().learn(transaction)
        self.learning = False

    def classify(self, transaction: Transaction) -> list:
        if self.learning:
            self.overlaps += 1
        return super().classify(transaction)


@pytest.mark.anyio
async def test_categorize_waits_for_training_page(transactions: list[Transaction]) -> None:
    classifier = SlowFuzzyClassifier()
    service = CategorizerService(classifier=classifier, policy=ConfidencePolicy())
    manager = TrainingManager(service=service, page_size=1)
    query = Transaction(id=50, details="Starbucks Coffee")

    result, *_ = await asyncio.gather(
        manager.train_bulk(transactions),
        *(asyncio.to_thread(service.categorize, query) for _ in range(5)),
    )

    assert result["trained"] == 3
    assert classifier.overlaps == 0


@pytest.mark.anyio
async def test_train_bulk_waits_for_service_lock(manager: TrainingManager, transactions: list[Transaction]) -> None:
    manager.service.model_lock.acquire()
    task = asyncio.create_task(manager.train_bulk(transactions))
    await asyncio.sleep(0.05)

    assert manager.service.classifier.model_data == []

    manager.service.model_lock.release()
    result = await task
    assert result["trained"] == 3


@pytest.mark.anyio
async def test_bulk_runs_do_not_interleave(manager: TrainingManager, transactions: list[Transaction]) -> None:
    first, second = await asyncio.gather(
        manager.train_bulk(transactions),
        manager.train_bulk(transactions),
    )

    assert first["trained"] == 3
    assert second == {
        "status": "complete",
        "trained": 0,
        "skipped": 2,
        "skipped_duplicate": 3,
        "total": 5,
    }
