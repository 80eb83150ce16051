from abc import ABC, abstractmethod

from ledger_categorizer.models import Category, CategoryMatch

# Matches at or below this confidence are noise
CUT_OFF = 62


class Reducer(ABC):
    """
    Collapse a list of matches, possibly holding the same category many times,
    into one match per category sorted by confidence, highest first.
    """

    @abstractmethod
    def reduce(self, matches: list[CategoryMatch]) -> list[CategoryMatch]:
        pass

    @staticmethod
    def group(matches: list[CategoryMatch]) -> dict[Category, list[int]]:
        grouped: dict[Category, list[int]] = {}
        for match in matches:
            if match.confidence <= CUT_OFF:
                continue
            grouped.setdefault(match.category, []).append(match.confidence)
        return grouped

    @staticmethod
    def sort(matches: list[CategoryMatch]) -> list[CategoryMatch]:
        return sorted(matches, key=lambda m: m.confidence, reverse=True)


class AverageReducer(Reducer):
    def reduce(self, matches: list[CategoryMatch]) -> list[CategoryMatch]:
        reduced = []
        for category, scores in self.group(matches).items():
            # Categories backed by more transactions get a small bonus
            confidence = sum(scores) // len(scores) + (len(scores) - 1)
            reduced.append(CategoryMatch(category=category, confidence=confidence))
        return self.sort(reduced)


class MaximumReducer(Reducer):
    def reduce(self, matches: list[CategoryMatch]) -> list[CategoryMatch]:
        reduced = [
            CategoryMatch(category=category, confidence=max(scores))
            for category, scores in self.group(matches).items()
        ]
        return self.sort(reduced)
