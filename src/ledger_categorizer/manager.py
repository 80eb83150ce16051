import threading
from collections.abc import Iterable

from pydantic import BaseModel

from ledger_categorizer.classifiers.base import Classifier
from ledger_categorizer.classifiers.factory import build_classifier_from_settings
from ledger_categorizer.confidence import MAX_COMPUTED_CONFIDENCE, USER_SET_CONFIDENCE, ConfidencePolicy
from ledger_categorizer.logger import get_logger
from ledger_categorizer.models import Category, CategoryMatch, Transaction
from ledger_categorizer.repository import TransactionRepository

logger = get_logger(__name__)


class CategorizationSummary(BaseModel):
    pretty_sure: int = 0
    need_confirmation: int = 0
    unmatched: int = 0
    skipped: int = 0


class CategorizerService:
    def __init__(self,
                 classifier: Classifier | None = None,
                 policy: ConfidencePolicy | None = None):
        self.classifier = classifier or build_classifier_from_settings()
        self.policy = policy or ConfidencePolicy.from_settings()
        # Held around every classifier call; bulk training takes it from worker threads
        self.model_lock = threading.Lock()
        logger.info(f"Categorizer using {self.classifier.__class__.__name__}")

    @staticmethod
    def is_trainable(transaction: Transaction) -> bool:
        return transaction.category is not None and not transaction.inflow

    def train(self, transactions: Iterable[Transaction]) -> tuple[int, int]:
        """
        Teach the classifier every categorized outflow transaction.
        """
        trained = 0
        skipped = 0
        for transaction in transactions:
            if not self.is_trainable(transaction):
                skipped += 1
                continue
            with self.model_lock:
                self.classifier.learn(transaction)
            trained += 1
        logger.info(f"Trained on {trained} transactions, skipped {skipped}")
        return trained, skipped

    def train_from_repository(self, repository: TransactionRepository) -> tuple[int, int]:
        return self.train(repository.list_all())

    def suggest(self, transaction: Transaction) -> list[CategoryMatch]:
        """
        Ranked suggestions for a category picker, best first.
        """
        with self.model_lock:
            matches = self.classifier.classify(transaction)
        if self.classifier.ascending:
            matches = list(reversed(matches))
        return matches

    def categorize(self, transaction: Transaction) -> Transaction:
        """
        Look for a category and apply it if the confidence is high enough.

        Returns the transaction unchanged when nothing was assigned, otherwise an
        updated copy. Pretty sure matches are also fed back to the classifier.
        """
        if transaction.inflow or transaction.confidence >= USER_SET_CONFIDENCE:
            return transaction

        with self.model_lock:
            best = self.classifier.get_best(transaction)
            decision = self.policy.decide(best)
            if not decision.assign:
                logger.debug(f"No category assigned to '{transaction.details[:50]}' ({decision.level.name})")
                return transaction

            updated = transaction.model_copy(update={
                "category": best.category,
                "confidence": min(best.confidence, MAX_COMPUTED_CONFIDENCE),
            })
            if decision.learn:
                self.classifier.learn(updated)

        if decision.learn:
            logger.info(
                f"Automatically matched '{transaction.details[:50]}' with "
                f"'{best.category.title}' (confidence: {best.confidence})"
            )
        else:
            logger.debug(
                f"'{transaction.details[:50]}' needs confirmation for "
                f"'{best.category.title}' (confidence: {best.confidence})"
            )
        return updated

    def categorize_all(
        self, transactions: Iterable[Transaction]
    ) -> tuple[list[Transaction], CategorizationSummary]:
        summary = CategorizationSummary()
        results = []
        for transaction in transactions:
            if transaction.inflow or transaction.confidence >= USER_SET_CONFIDENCE:
                summary.skipped += 1
                results.append(transaction)
                continue

            updated = self.categorize(transaction)
            results.append(updated)
            if updated is transaction:
                summary.unmatched += 1
            elif self.policy.level(updated.confidence).needs_confirmation:
                summary.need_confirmation += 1
            else:
                summary.pretty_sure += 1

        logger.info(
            f"Categorized {summary.pretty_sure} automatically, "
            f"{summary.need_confirmation} need confirmation, {summary.unmatched} unmatched"
        )
        return results, summary

    def confirm(self, transaction: Transaction, category: Category) -> Transaction:
        """
        Apply a category chosen by the user and learn from it.
        """
        updated = transaction.model_copy(update={
            "category": category,
            "confidence": USER_SET_CONFIDENCE,
        })
        with self.model_lock:
            self.classifier.learn(updated)
        logger.debug(f"User set '{category.title}' for '{transaction.details[:50]}'")
        return updated

    def clear_models(self) -> None:
        """
        Clear all training data.
        """
        with self.model_lock:
            self.classifier.reset()
        logger.info("All models cleared.")
