"""Fuzzy matching of payload values against server-populated dropdown options.

The ERP's search dropdowns list whatever the server returns for the typed
text, so the exact option label is rarely known up front. Each option is
scored against the wanted value and the best one is picked.
"""
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)

EXACT_SCORE = 1000
WORD_MATCH = 100
PARTIAL_WORD_MATCH = 50
ALL_WORDS_BONUS = 200
PREFERRED_GSM_BONUS = 75
ACCEPTABLE_GSM_BONUS = 25
GSM_NUMBER_BONUS = 500
PHRASE_BONUS = 150
CONTAINED_BONUS = 100
DOMAIN_TERMS = (("art", 150), ("paper", 100), ("board", 50))
LONG_CANDIDATE = 50
LONG_PENALTY = 20
SHORT_CANDIDATE = 25
SHORT_BONUS = 30

GSM_TOKEN = re.compile(r"(\d+)\s*gsm")


class FieldKind(str, Enum):
    QUALITY = "quality"
    GSM = "gsm"
    MILL = "mill"
    FINISH = "finish"
    GENERIC = "generic"


class MatchStrategy(str, Enum):
    EXACT = "exact"
    SCORED = "scored"
    FIRST_CANDIDATE = "first_candidate"
    TYPED_TEXT = "typed_text"


@dataclass
class MatchCandidate:
    text: str
    score: int = 0


@dataclass(frozen=True)
class MatchOutcome:
    chosen: str
    score: int
    strategy: MatchStrategy
    index: Optional[int] = None

    @property
    def is_fallback(self) -> bool:
        return self.strategy in (MatchStrategy.FIRST_CANDIDATE, MatchStrategy.TYPED_TEXT)


def normalize(text: Optional[str]) -> str:
    return " ".join((text or "").lower().split())


def score_candidate(target: str, candidate: str, kind: FieldKind = FieldKind.GENERIC) -> int:
    """Score how well `candidate` stands for `target`. Pure; never negative."""
    target = normalize(target)
    candidate = normalize(candidate)
    if not target or not candidate:
        return 0
    if target == candidate:
        return EXACT_SCORE

    target_words = target.split()
    candidate_words = candidate.split()
    score = 0

    for word in target_words:
        if word in candidate_words:
            score += WORD_MATCH
        elif any(word in c for c in candidate_words):
            score += PARTIAL_WORD_MATCH

    if all(any(word in c for c in candidate_words) for word in target_words):
        score += ALL_WORDS_BONUS

    if kind in (FieldKind.QUALITY, FieldKind.GSM):
        gsm = GSM_TOKEN.search(candidate)
        if gsm:
            value = int(gsm.group(1))
            if 120 <= value <= 200:
                score += PREFERRED_GSM_BONUS
            elif 80 <= value <= 300:
                score += ACCEPTABLE_GSM_BONUS

    if kind == FieldKind.GSM:
        number = re.search(r"\d+", target)
        if number and re.search(rf"(?<!\d){number.group()}(?!\d)", candidate):
            score += GSM_NUMBER_BONUS

    if kind in (FieldKind.MILL, FieldKind.FINISH):
        if re.search(rf"\b{re.escape(target)}\b", candidate):
            score += PHRASE_BONUS
        if candidate in target:
            score += CONTAINED_BONUS

    if kind == FieldKind.QUALITY:
        for term, bonus in DOMAIN_TERMS:
            if term in target and term in candidate:
                score += bonus

    if len(candidate) > LONG_CANDIDATE:
        score -= LONG_PENALTY
    elif len(candidate) < SHORT_CANDIDATE and score > 50:
        score += SHORT_BONUS

    return max(score, 0)


def select_best_match(
    target: str,
    candidates: Sequence[str],
    kind: FieldKind = FieldKind.GENERIC,
) -> MatchOutcome:
    """Pick the option that best represents `target`.

    Exact matches win outright. Otherwise the highest non-zero score wins and
    the first-seen candidate takes ties. With no scoring candidate the first
    option is used, and with no options at all the typed text is kept.
    """
    if not candidates:
        logger.info(f"No options listed for '{target}', keeping typed text")
        return MatchOutcome(chosen=target, score=0, strategy=MatchStrategy.TYPED_TEXT)

    scored: List[MatchCandidate] = []
    for i, text in enumerate(candidates):
        score = score_candidate(target, text, kind)
        if score == EXACT_SCORE and normalize(text) == normalize(target):
            return MatchOutcome(chosen=text, score=score, strategy=MatchStrategy.EXACT, index=i)
        scored.append(MatchCandidate(text=text, score=score))

    best_index, best = 0, scored[0]
    for i, candidate in enumerate(scored[1:], start=1):
        if candidate.score > best.score:
            best_index, best = i, candidate

    if best.score > 0:
        logger.debug(f"Best match for '{target}' is '{best.text}' ({best.score})")
        return MatchOutcome(chosen=best.text, score=best.score, strategy=MatchStrategy.SCORED, index=best_index)

    logger.warning(f"No option scored for '{target}', falling back to '{candidates[0]}'")
    return MatchOutcome(chosen=candidates[0], score=0, strategy=MatchStrategy.FIRST_CANDIDATE, index=0)
