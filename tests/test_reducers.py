import pytest

from ledger_categorizer.classifiers.reducers import CUT_OFF, AverageReducer, MaximumReducer
from ledger_categorizer.models import Category, CategoryMatch

A = Category(id=1, title="A")
B = Category(id=2, title="B")


def match(category: Category, confidence: int) -> CategoryMatch:
    return CategoryMatch(category=category, confidence=confidence)


def test_average_reducer_averages_with_count_bonus() -> None:
    matches = [match(A, 80), match(A, 70), match(B, 90), match(A, 50)]

    reduced = AverageReducer().reduce(matches)

    # A: (80 + 70) // 2 + 1, the 50 is below the cut off
    assert reduced == [match(B, 90), match(A, 76)]


def test_average_reducer_bonus_is_monotonic_in_count() -> None:
    reducer = AverageReducer()
    scores = [reducer.reduce([match(A, 80)] * count)[0].confidence for count in range(1, 6)]

    assert scores == sorted(scores)
    assert scores[0] == 80
    assert scores[-1] == 84


def test_maximum_reducer_keeps_highest_score() -> None:
    matches = [match(A, 70), match(B, 75), match(A, 88), match(B, 64)]

    reduced = MaximumReducer().reduce(matches)

    assert reduced == [match(A, 88), match(B, 75)]


@pytest.mark.parametrize("reducer", [AverageReducer(), MaximumReducer()])
def test_reducers_drop_matches_at_or_below_cut_off(reducer) -> None:
    matches = [match(A, CUT_OFF), match(B, CUT_OFF + 1), match(A, 10)]

    assert reducer.reduce(matches) == [match(B, CUT_OFF + 1)]


@pytest.mark.parametrize("reducer", [AverageReducer(), MaximumReducer()])
def test_reducers_return_one_match_per_category(reducer) -> None:
    matches = [match(A, 63 + i) for i in range(10)] + [match(B, 99 - i) for i in range(10)]

    reduced = reducer.reduce(matches)

    categories = [m.category for m in reduced]
    assert len(categories) == len(set(categories)) == 2
    assert [m.confidence for m in reduced] == sorted((m.confidence for m in reduced), reverse=True)


@pytest.mark.parametrize("reducer", [AverageReducer(), MaximumReducer()])
def test_reducers_handle_empty_input(reducer) -> None:
    assert reducer.reduce([]) == []


def test_reducers_group_by_category_id_not_title() -> None:
    renamed = Category(id=1, title="A renamed")

    reduced = MaximumReducer().reduce([match(A, 70), match(renamed, 90)])

    assert len(reduced) == 1
    assert reduced[0].confidence == 90
