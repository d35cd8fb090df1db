"""
Market Radar - Keyword & Sentiment Analyzer

Titles are lowercased and split on whitespace; tokens of length <= 3 are
dropped. The ten most frequent tokens are the relevant terms (ties keep
first-seen order).

    sentiment = (positive hits - negative hits) / token count
"""

from __future__ import annotations

from typing import Iterable, Sequence

import structlog

from src.config import settings
from src.models.analysis import KeywordAnalysis
from src.models.listing import Listing

logger = structlog.get_logger(__name__)


def tokenize(titles: Iterable[str], min_length: int | None = None) -> list[str]:
    cutoff = min_length if min_length is not None else settings.KEYWORD_MIN_LENGTH
    return [
        token
        for title in titles
        for token in title.lower().split()
        if len(token) > cutoff
    ]


def score_sentiment(
    tokens: Sequence[str],
    positive: Iterable[str] | None = None,
    negative: Iterable[str] | None = None,
) -> float:
    if not tokens:
        return 0.0
    pos = set(positive if positive is not None else settings.POSITIVE_LEXICON)
    neg = set(negative if negative is not None else settings.NEGATIVE_LEXICON)
    score = sum(1 for t in tokens if t in pos) - sum(1 for t in tokens if t in neg)
    return score / len(tokens)


def analyze_keywords(listings: Sequence[Listing], top_n: int | None = None) -> KeywordAnalysis:
    """
    Term frequencies, top terms and lexicon sentiment over listing titles.

    Returns an empty analysis when no title yields a token.
    """
    limit = top_n if top_n is not None else settings.KEYWORD_TOP_TERMS
    tokens = tokenize(listing.title for listing in listings)
    if not tokens:
        return KeywordAnalysis()

    frequency: dict[str, int] = {}
    for token in tokens:
        frequency[token] = frequency.get(token, 0) + 1

    # sorted() is stable and dicts keep insertion order, so ties stay first-seen
    ranked = sorted(frequency.items(), key=lambda item: item[1], reverse=True)

    analysis = KeywordAnalysis(
        relevant_terms=[term for term, _ in ranked[:limit]],
        frequency=frequency,
        sentiment=score_sentiment(tokens),
    )
    logger.debug(
        "keywords_analyzed",
        token_count=len(tokens),
        distinct_terms=len(frequency),
        sentiment=round(analysis.sentiment, 4),
    )
    return analysis
