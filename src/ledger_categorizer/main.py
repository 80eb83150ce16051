import argparse
import csv
from pathlib import Path

from ledger_categorizer.classifiers.factory import build_classifier
from ledger_categorizer.core import settings
from ledger_categorizer.logger import get_logger, setup_logging
from ledger_categorizer.models import Category, Transaction
from ledger_categorizer.services.evaluation import evaluate

logger = get_logger(__name__)

# (label, classifier kind, reducer)
CONFIGURATIONS = (
    ("FuzzyClassifier with AverageReducer", "fuzzy", "average"),
    ("FuzzyClassifier with MaximumReducer", "fuzzy", "maximum"),
    ("NaiveClassifier", "naive", "average"),
    ("CombinedClassifier", "combined", "average"),
)


def load_transactions(path: Path) -> list[Transaction]:
    """
    Read labelled transactions from a CSV with ``id``, ``details`` and
    ``category`` columns. Categories get ids in order of first appearance and
    rows with an empty category are kept uncategorized.
    """
    categories: dict[str, Category] = {}
    transactions: list[Transaction] = []
    with open(path, newline="", encoding="utf-8") as handle:
        for line, row in enumerate(csv.DictReader(handle), start=2):
            try:
                transaction_id = int(row["id"])
                details = row["details"] or ""
                title = (row.get("category") or "").strip()
            except (KeyError, TypeError, ValueError):
                logger.warning(f"Skipping malformed row {line} in {path}")
                continue

            category = None
            if title:
                category = categories.setdefault(title, Category(id=len(categories) + 1, title=title))
            transactions.append(Transaction(id=transaction_id, details=details, category=category))

    logger.info(f"Loaded {len(transactions)} transactions in {len(categories)} categories from {path}")
    return transactions


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Measure how accurately each classifier categorizes labelled transactions",
    )
    parser.add_argument(
        "data",
        type=Path,
        help="CSV file with id, details and category columns",
    )
    parser.add_argument(
        "--iterations",
        type=int,
        default=settings.get_env_int(
            "EVALUATION_ITERATIONS",
            settings.DEFAULT_EVALUATION_ITERATIONS,
            min_value=1,
        ),
        help="Number of shuffled train/check rounds per classifier",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the shuffles, for repeatable reports",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    setup_logging()
    settings.log_environment()

    data = load_transactions(args.data)
    for label, kind, reducer in CONFIGURATIONS:
        classifier = build_classifier(
            kind=kind,
            reducer=reducer,
            memory_capacity=settings.get_env_int(
                "NAIVE_MEMORY_CAPACITY",
                settings.DEFAULT_NAIVE_MEMORY_CAPACITY,
                min_value=1,
            ),
        )
        report = evaluate(classifier, data, iterations=args.iterations, seed=args.seed, name=label)
        print(report.render())
        print()


if __name__ == "__main__":
    main()
