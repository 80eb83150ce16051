import random
from collections.abc import Sequence

from pydantic import BaseModel

from ledger_categorizer.classifiers.base import Classifier
from ledger_categorizer.core import settings
from ledger_categorizer.logger import get_logger
from ledger_categorizer.models import Transaction

logger = get_logger(__name__)

DEFAULT_ITERATIONS = settings.DEFAULT_EVALUATION_ITERATIONS


class AccuracyReport(BaseModel):
    name: str = ""
    total: int = 0
    no_match: int = 0
    good_match: int = 0
    bad_match: int = 0
    average_confidence: float = 0.0
    good_confidence: float = 0.0
    bad_confidence: float = 0.0
    average_delta: float = 0.0

    @property
    def any_match(self) -> int:
        return self.good_match + self.bad_match

    @property
    def match_accuracy(self) -> float:
        """Share of the proposed categories that were right."""
        return _percent(self.good_match, self.any_match)

    @property
    def match_probability(self) -> float:
        """Share of all checked transactions that got the right category."""
        return _percent(self.good_match, self.any_match + self.no_match)

    def render(self) -> str:
        return "\n".join([
            f"==> {self.name}" if self.name else "==>",
            f"Total transactions: {self.total}",
            "",
            f"  No match: {self.no_match}",
            f"Good match: {self.good_match}",
            f" Bad match: {self.bad_match}",
            "",
            f"Average accuracy: {self.average_confidence:.2f} %",
            f"   Good accuracy: {self.good_confidence:.2f} %",
            f"    Bad accuracy: {self.bad_confidence:.2f} %",
            "",
            f"Avg delta: {self.average_delta:.2f}",
            "",
            f"   Match accuracy: {self.match_accuracy:.2f} %",
            f"Match probability: {self.match_probability:.2f} %",
        ])


def _mean(total: float, count: int) -> float:
    return total / count if count else 0.0


def _percent(part: int, whole: int) -> float:
    return part / whole * 100 if whole else 0.0


def evaluate(
    classifier: Classifier,
    data: Sequence[Transaction],
    iterations: int = DEFAULT_ITERATIONS,
    seed: int | None = None,
    name: str = "",
) -> AccuracyReport:
    """
    Cross-validate a classifier on categorized transactions.

    Every iteration shuffles the data, trains a freshly reset classifier on
    the first half and checks its best guess for each transaction of the
    second half. The classifier is left trained on the last iteration's half.
    """
    labelled = [t for t in data if t.category is not None]
    rng = random.Random(seed)
    training_size = len(labelled) // 2

    no_match = good_match = bad_match = delta_count = 0
    confidence_sum = good_sum = bad_sum = delta_sum = 0.0

    for iteration in range(iterations):
        rng.shuffle(labelled)
        training = labelled[:training_size]
        crosscheck = labelled[training_size:]

        classifier.reset()
        classifier.learn_all(training)

        for transaction in crosscheck:
            best = classifier.get_best(transaction)
            if best is None:
                no_match += 1
                continue

            confidence_sum += best.confidence
            if best.category == transaction.category:
                good_match += 1
                good_sum += best.confidence
                continue

            bad_match += 1
            bad_sum += best.confidence
            for match in classifier.classify(transaction):
                if match.category == transaction.category:
                    delta_count += 1
                    delta_sum += best.confidence - match.confidence

        logger.debug(f"[EVAL] Iteration {iteration + 1}/{iterations} done")

    report = AccuracyReport(
        name=name,
        total=len(labelled),
        no_match=no_match,
        good_match=good_match,
        bad_match=bad_match,
        average_confidence=_mean(confidence_sum, good_match + bad_match),
        good_confidence=_mean(good_sum, good_match),
        bad_confidence=_mean(bad_sum, bad_match),
        average_delta=_mean(delta_sum, delta_count),
    )
    logger.info(
        f"[EVAL] {name or classifier.__class__.__name__}: "
        f"match accuracy {report.match_accuracy:.2f} %, "
        f"match probability {report.match_probability:.2f} %"
    )
    return report
