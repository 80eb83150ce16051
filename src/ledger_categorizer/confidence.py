"""
Confidence levels used to decide what happens with a suggested category.

A match below NEED_CONFIRMATION is ignored. A match between NEED_CONFIRMATION
and PRETTY_SURE is assigned but waits for the user to confirm it, and is never
learned so the classifier doesn't train itself on its own guesses. A PRETTY_SURE
match is assigned and learned straight away. USER_SET is above anything a
classifier can compute and marks a category chosen by a person.
"""
from dataclasses import dataclass

from ledger_categorizer.core import settings
from ledger_categorizer.logger import get_logger
from ledger_categorizer.models import CategoryMatch

logger = get_logger(__name__)

NONE = "NONE"
NEED_CONFIRMATION = "NEED_CONFIRMATION"
PRETTY_SURE = "PRETTY_SURE"
USER_SET = "USER_SET"

USER_SET_CONFIDENCE = 101

# Computed scores are capped here so they never pass for a user choice
MAX_COMPUTED_CONFIDENCE = USER_SET_CONFIDENCE - 1


@dataclass(frozen=True)
class ConfidenceLevel:
    name: str
    lower_bound: int
    assign: bool
    needs_confirmation: bool
    learn: bool


@dataclass(frozen=True)
class Decision:
    level: ConfidenceLevel
    match: CategoryMatch | None

    @property
    def assign(self) -> bool:
        return self.match is not None and self.level.assign

    @property
    def needs_confirmation(self) -> bool:
        return self.assign and self.level.needs_confirmation

    @property
    def learn(self) -> bool:
        return self.assign and self.level.learn


def build_levels(
    need_confirmation: int = settings.DEFAULT_NEED_CONFIRMATION_THRESHOLD,
    pretty_sure: int = settings.DEFAULT_PRETTY_SURE_THRESHOLD,
) -> tuple[ConfidenceLevel, ...]:
    return (
        ConfidenceLevel(NONE, 0, assign=False, needs_confirmation=False, learn=False),
        ConfidenceLevel(NEED_CONFIRMATION, need_confirmation, assign=True, needs_confirmation=True, learn=False),
        ConfidenceLevel(PRETTY_SURE, pretty_sure, assign=True, needs_confirmation=False, learn=True),
        ConfidenceLevel(USER_SET, USER_SET_CONFIDENCE, assign=True, needs_confirmation=False, learn=True),
    )


class ConfidencePolicy:
    def __init__(self, levels: tuple[ConfidenceLevel, ...] | None = None):
        self.levels = levels or build_levels()
        bounds = [level.lower_bound for level in self.levels]
        if not bounds or bounds[0] != 0 or any(a >= b for a, b in zip(bounds, bounds[1:])):
            raise ValueError(f"Confidence bounds must start at 0 and strictly increase, got {bounds}")

    @classmethod
    def from_settings(cls) -> "ConfidencePolicy":
        need_confirmation = settings.get_env_int(
            "NEED_CONFIRMATION_THRESHOLD",
            settings.DEFAULT_NEED_CONFIRMATION_THRESHOLD,
            min_value=1,
        )
        pretty_sure = settings.get_env_int(
            "PRETTY_SURE_THRESHOLD",
            settings.DEFAULT_PRETTY_SURE_THRESHOLD,
            min_value=1,
        )
        if not need_confirmation < pretty_sure < USER_SET_CONFIDENCE:
            logger.warning(
                "[ENV] Thresholds %s/%s are not increasing below %s, using defaults %s/%s.",
                need_confirmation,
                pretty_sure,
                USER_SET_CONFIDENCE,
                settings.DEFAULT_NEED_CONFIRMATION_THRESHOLD,
                settings.DEFAULT_PRETTY_SURE_THRESHOLD,
            )
            return cls()
        return cls(build_levels(need_confirmation=need_confirmation, pretty_sure=pretty_sure))

    def level(self, confidence: int) -> ConfidenceLevel:
        """Highest level whose lower bound the confidence reaches."""
        current = self.levels[0]
        for level in self.levels:
            if confidence >= level.lower_bound:
                current = level
        return current

    def level_of(self, name: str) -> ConfidenceLevel:
        for level in self.levels:
            if level.name == name:
                return level
        raise KeyError(name)

    def decide(self, match: CategoryMatch | None) -> Decision:
        if match is None:
            return Decision(level=self.levels[0], match=None)
        return Decision(level=self.level(min(match.confidence, MAX_COMPUTED_CONFIDENCE)), match=match)
