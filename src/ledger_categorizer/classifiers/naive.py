import math
from collections import Counter, deque

from ledger_categorizer.domain.text import tokenize
from ledger_categorizer.logger import get_logger
from ledger_categorizer.models import Category, CategoryMatch, Transaction

from .base import Classifier

logger = get_logger(__name__)

DEFAULT_MEMORY_CAPACITY = 50000

# Matches at or below this confidence are dropped
CUT_OFF = 35

# Smoothing applied to every feature probability
FEATURE_WEIGHT = 1.0
ASSUMED_PROBABILITY = 0.5


class BoundedFeatureCounter:
    """
    Word and category frequencies over the last ``capacity`` observations.

    Observations are kept in arrival order; once the capacity is exceeded the
    oldest one is evicted and its counts are taken back out of the tables.
    """

    def __init__(self, capacity: int = DEFAULT_MEMORY_CAPACITY):
        if capacity < 1:
            raise ValueError(f"Memory capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.observations: deque[tuple[tuple[str, ...], Category]] = deque()
        self.feature_counts: dict[Category, Counter[str]] = {}
        self.feature_totals: Counter[str] = Counter()
        self.category_counts: Counter[Category] = Counter()

    def __len__(self) -> int:
        return len(self.observations)

    @property
    def total(self) -> int:
        return len(self.observations)

    @property
    def categories(self) -> list[Category]:
        return list(self.category_counts)

    def add(self, features: list[str], category: Category) -> None:
        observation = (tuple(features), category)
        self.observations.append(observation)
        self._count(observation, 1)

        while len(self.observations) > self.capacity:
            evicted = self.observations.popleft()
            self._count(evicted, -1)

    def feature_count(self, feature: str, category: Category) -> int:
        counts = self.feature_counts.get(category)
        return counts[feature] if counts else 0

    def clear(self) -> None:
        self.observations.clear()
        self.feature_counts.clear()
        self.feature_totals.clear()
        self.category_counts.clear()

    def _count(self, observation: tuple[tuple[str, ...], Category], delta: int) -> None:
        features, category = observation
        counts = self.feature_counts.setdefault(category, Counter())
        for feature in features:
            counts[feature] += delta
            self.feature_totals[feature] += delta
            if counts[feature] <= 0:
                del counts[feature]
            if self.feature_totals[feature] <= 0:
                del self.feature_totals[feature]

        self.category_counts[category] += delta
        if self.category_counts[category] <= 0:
            del self.category_counts[category]
            del self.feature_counts[category]


class NaiveClassifier(Classifier):
    """
    Bag of words Bayesian classifier.

    The probability of a category is its prior multiplied by the smoothed
    probability of every word of the details. Results are not normalized
    across categories, so long details give small probabilities. It does
    poorly on small training sets and is meant to be a minor voice in the
    combined classifier.

    Details without any usable word have no features at all, so they are
    scored on the category priors alone rather than on an empty word.
    Confidences round half up, so 35.5 becomes 36 and passes the cut off.
    """

    def __init__(self, memory_capacity: int = DEFAULT_MEMORY_CAPACITY):
        self.memory = BoundedFeatureCounter(memory_capacity)

    def learn(self, transaction: Transaction) -> None:
        self._require_category(transaction)
        self.memory.add(tokenize(transaction.details), transaction.category)

    def classify(self, transaction: Transaction) -> list[CategoryMatch]:
        if not self.memory.total:
            return []

        features = tokenize(transaction.details)
        matches = []
        for category in self.memory.categories:
            confidence = math.floor(self.probability(features, category) * 100 + 0.5)
            if confidence > CUT_OFF:
                matches.append(CategoryMatch(category=category, confidence=confidence))

        return sorted(matches, key=lambda m: m.confidence, reverse=True)

    def probability(self, features: list[str], category: Category) -> float:
        prior = self.memory.category_counts[category] / self.memory.total
        product = 1.0
        for feature in features:
            product *= self._feature_weighed_average(feature, category)
        return prior * product

    def _feature_weighed_average(self, feature: str, category: Category) -> float:
        # A word repeated within one details string is counted every time, cap
        # its frequency so each factor stays a probability
        basic = min(1.0, self.memory.feature_count(feature, category) / self.memory.category_counts[category])
        totals = self.memory.feature_totals[feature]
        return (FEATURE_WEIGHT * ASSUMED_PROBABILITY + totals * basic) / (FEATURE_WEIGHT + totals)

    def reset(self) -> None:
        self.memory.clear()
        logger.debug("Naive model data cleared")
