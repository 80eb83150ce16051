from ledger_categorizer.core import settings

from .base import Classifier
from .combined import CombinedClassifier
from .fuzzy import FuzzyClassifier
from .naive import NaiveClassifier
from .reducers import AverageReducer, MaximumReducer, Reducer

REDUCERS: dict[str, type[Reducer]] = {
    "average": AverageReducer,
    "maximum": MaximumReducer,
}

CLASSIFIERS = ("fuzzy", "naive", "combined")


def build_reducer(name: str) -> Reducer:
    try:
        return REDUCERS[name]()
    except KeyError:
        raise ValueError(f"Unknown reducer '{name}', expected one of {', '.join(REDUCERS)}") from None


def build_classifier(
    kind: str = settings.DEFAULT_CLASSIFIER,
    reducer: str = settings.DEFAULT_REDUCER,
    memory_capacity: int = settings.DEFAULT_NAIVE_MEMORY_CAPACITY,
) -> Classifier:
    if kind == "fuzzy":
        return FuzzyClassifier(build_reducer(reducer))
    if kind == "naive":
        return NaiveClassifier(memory_capacity)
    if kind == "combined":
        return CombinedClassifier(
            fuzzy=FuzzyClassifier(build_reducer(reducer)),
            naive=NaiveClassifier(memory_capacity),
        )
    raise ValueError(f"Unknown classifier '{kind}', expected one of {', '.join(CLASSIFIERS)}")


def build_classifier_from_settings() -> Classifier:
    return build_classifier(
        kind=settings.get_env_str("CLASSIFIER", settings.DEFAULT_CLASSIFIER, CLASSIFIERS),
        reducer=settings.get_env_str("REDUCER", settings.DEFAULT_REDUCER, tuple(REDUCERS)),
        memory_capacity=settings.get_env_int(
            "NAIVE_MEMORY_CAPACITY",
            settings.DEFAULT_NAIVE_MEMORY_CAPACITY,
            min_value=1,
        ),
    )
