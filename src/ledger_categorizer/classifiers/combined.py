import math

from ledger_categorizer.logger import get_logger
from ledger_categorizer.models import Category, CategoryMatch, Transaction

from .base import Classifier
from .fuzzy import FuzzyClassifier
from .naive import NaiveClassifier

logger = get_logger(__name__)

FUZZY_WEIGHT = 0.75
NAIVE_WEIGHT = 0.25

# Matches at or below this confidence are dropped
CUT_OFF = 30


class CombinedClassifier(Classifier):
    """
    Weighted vote between a fuzzy and a naive classifier.

    The fuzzy classifier carries most of the weight, the naive one mostly
    breaks ties. Matches are returned in ascending order of confidence, so the
    best match is the last one.
    """

    ascending = True

    def __init__(
        self,
        fuzzy: FuzzyClassifier | None = None,
        naive: NaiveClassifier | None = None,
    ):
        self.fuzzy = fuzzy or FuzzyClassifier()
        self.naive = naive or NaiveClassifier()

    def learn(self, transaction: Transaction) -> None:
        self.fuzzy.learn(transaction)
        self.naive.learn(transaction)

    def classify(self, transaction: Transaction) -> list[CategoryMatch]:
        fuzzy_scores = self._by_category(self.fuzzy.classify(transaction))
        naive_scores = self._by_category(self.naive.classify(transaction))

        categories = list(fuzzy_scores)
        categories.extend(c for c in naive_scores if c not in fuzzy_scores)

        matches = []
        for category in categories:
            confidence = 0
            if category in fuzzy_scores:
                confidence += math.floor(FUZZY_WEIGHT * fuzzy_scores[category])
            if category in naive_scores:
                confidence += math.floor(NAIVE_WEIGHT * naive_scores[category])
            if confidence > CUT_OFF:
                matches.append(CategoryMatch(category=category, confidence=confidence))

        logger.debug(
            f"Combined {len(fuzzy_scores)} fuzzy and {len(naive_scores)} naive matches "
            f"into {len(matches)} for transaction {transaction.id}"
        )
        return sorted(matches, key=lambda m: m.confidence)

    @staticmethod
    def _by_category(matches: list[CategoryMatch]) -> dict[Category, int]:
        scores: dict[Category, int] = {}
        for match in matches:
            # Sub-classifiers return one match per category, keep the first if not
            scores.setdefault(match.category, match.confidence)
        return scores

    def reset(self) -> None:
        self.fuzzy.reset()
        self.naive.reset()
