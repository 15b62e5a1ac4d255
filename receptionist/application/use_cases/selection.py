from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass

from receptionist.application.exceptions import ShortlistRequired
from receptionist.application.utils.date_parser import parse_clock_time, parse_part_of_day, parse_weekday
from receptionist.domain.entities.conversation_state import ConversationState
from receptionist.domain.entities.time_interval import Slot

WEEKDAY_PENALTY = 1000

# "to" / "too" are common speech-to-text renderings of "two".
ORDINAL_PATTERNS = (
    (0, re.compile(r"(^|\b)(option\s*)?(one|first|1)\b")),
    (1, re.compile(r"(^|\b)(option\s*)?(two|second|2|too|to)\b")),
    (2, re.compile(r"(^|\b)(option\s*)?(three|third|3)\b")),
)

_DIGITS_RE = re.compile(r"^[123]$")


@dataclass(frozen=True)
class NaturalTarget:
    weekday: int | None
    minute_of_day: int | None

    @property
    def has_signal(self) -> bool:
        return self.weekday is not None or self.minute_of_day is not None


def parse_number_choice(text: str) -> int | None:
    """Map a spoken or typed option number to a zero-based index."""
    normalized = (text or "").lower()
    for index, pattern in ORDINAL_PATTERNS:
        if pattern.search(normalized):
            return index
    return None


def parse_natural_target(text: str) -> NaturalTarget:
    weekday = parse_weekday(text)
    minute_of_day: int | None = None

    clock = parse_clock_time(text)
    if clock is not None:
        minute_of_day = clock[0] * 60 + clock[1]
    else:
        part = parse_part_of_day(text)
        if part is not None:
            minute_of_day = part.center_minute

    return NaturalTarget(weekday=weekday, minute_of_day=minute_of_day)


def score_slot(slot: Slot, target: NaturalTarget) -> int:
    score = 0
    if target.weekday is not None:
        diff = abs(slot.start.weekday() - target.weekday)
        score += min(diff, 7 - diff) * WEEKDAY_PENALTY
    if target.minute_of_day is not None:
        minutes = slot.start.hour * 60 + slot.start.minute
        score += abs(minutes - target.minute_of_day)
    return score


def match_natural(text: str, shortlist: Sequence[Slot]) -> int | None:
    """
    Score each offered slot against a stated weekday and/or time and return the
    best index. Weekday distance dominates any time difference; ties go to the
    earliest index. Returns None when the text names neither a day nor a time.
    """
    target = parse_natural_target(text)
    if not target.has_signal or not shortlist:
        return None

    best_index: int | None = None
    best_score: int | None = None
    for index, slot in enumerate(shortlist):
        score = score_slot(slot, target)
        if best_score is None or score < best_score:
            best_index, best_score = index, score
    return best_index


def match_selection(utterance: str, shortlist: Sequence[Slot], digits: str | None = None) -> int | None:
    """
    Resolve a caller reply to an index into the offered shortlist.

    Order: keypad digits, spoken ordinals/digits, then natural day/time matching.
    Returns None when nothing matches; never falls back to the first option.
    """
    if digits and _DIGITS_RE.match(digits.strip()):
        index = int(digits.strip()) - 1
        if index < len(shortlist):
            return index

    index = parse_number_choice(utterance)
    if index is not None and index < len(shortlist):
        return index

    return match_natural(utterance, shortlist)


class SelectionMatcher:
    def __init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def match(self, utterance: str, state: ConversationState, digits: str | None = None) -> int | None:
        if not state.has_shortlist:
            raise ShortlistRequired("No offered shortlist to select from")

        index = match_selection(utterance, state.offered, digits)
        self._logger.info(
            "Selection matched" if index is not None else "Selection not matched",
            extra={"action": "match_selection", "reason": None if index is not None else "no_match"},
        )
        return index
