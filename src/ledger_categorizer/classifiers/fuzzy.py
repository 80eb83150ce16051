from dataclasses import dataclass, replace

from rapidfuzz import fuzz, process

from ledger_categorizer.domain.text import sanitize
from ledger_categorizer.logger import get_logger
from ledger_categorizer.models import Category, CategoryMatch, Transaction

from .base import Classifier
from .reducers import AverageReducer, Reducer

logger = get_logger(__name__)


@dataclass
class ModelRow:
    transaction_id: int
    category: Category
    details: str # sanitized


class FuzzyClassifier(Classifier):
    """
    Scores a transaction against every learned transaction by text similarity
    and lets the reducer turn the per-row scores into one score per category.
    """

    def __init__(self, reducer: Reducer | None = None):
        self.reducer = reducer or AverageReducer()
        self.rows: list[ModelRow] = []

    @property
    def model_data(self) -> list[ModelRow]:
        return [replace(row) for row in self.rows]

    def learn(self, transaction: Transaction) -> None:
        self._require_category(transaction)

        for existing in self.rows:
            if existing.transaction_id == transaction.id:
                # Details of a known transaction never change, only its category does
                existing.category = transaction.category
                logger.debug(f"Model row {transaction.id} updated to '{transaction.category.title}'")
                return

        row = ModelRow(
            transaction_id=transaction.id,
            category=transaction.category,
            details=sanitize(transaction.details),
        )
        self.rows.append(row)
        logger.debug(f"Model row {transaction.id} added: '{row.details}' -> '{row.category.title}'")

    def classify(self, transaction: Transaction) -> list[CategoryMatch]:
        if not self.rows:
            return []

        scores = self._score(sanitize(transaction.details))
        matches = [
            CategoryMatch(category=row.category, confidence=score)
            for row, score in zip(self.rows, scores)
        ]
        reduced = self.reducer.reduce(matches)
        logger.debug(f"Found {len(reduced)} possible categories for transaction {transaction.id}")
        return reduced

    def _score(self, query: str) -> list[int]:
        """Similarity between the query and every model row, in row order."""
        scores = [0] * len(self.rows)
        if not query:
            return scores

        results = process.extract(
            query,
            [row.details for row in self.rows],
            scorer=fuzz.token_sort_ratio,
            limit=None,
        )
        for _, score, index in results:
            scores[index] = int(round(score))
        return scores

    def reset(self) -> None:
        self.rows = []
        logger.debug("Fuzzy model data cleared")
