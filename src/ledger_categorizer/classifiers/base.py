from abc import ABC, abstractmethod
from collections.abc import Iterable

from ledger_categorizer.models import CategoryMatch, Transaction


class Classifier(ABC):
    # Order in which classify() returns its matches
    ascending: bool = False

    @abstractmethod
    def learn(self, transaction: Transaction) -> None:
        """Add a categorized transaction to the model data."""
        pass

    @abstractmethod
    def classify(self, transaction: Transaction) -> list[CategoryMatch]:
        """Return the categories that may describe the transaction, at most one match per category."""
        pass

    @abstractmethod
    def reset(self) -> None:
        """Discard all the model data learned so far."""
        pass

    def learn_all(self, transactions: Iterable[Transaction]) -> None:
        for transaction in transactions:
            self.learn(transaction)

    def get_best(self, transaction: Transaction) -> CategoryMatch | None:
        matches = self.classify(transaction)
        if not matches:
            return None
        return matches[-1] if self.ascending else matches[0]

    @staticmethod
    def _require_category(transaction: Transaction) -> None:
        if transaction.category is None:
            raise ValueError(f"Cannot learn from transaction {transaction.id} without a category")
