"""
Query Parser
============

Parses free-text queries into a StructuredQuery:
- Query type (factual, relational, temporal, exploratory, semantic)
- Entities (quoted phrases, capitalised words)
- Keywords (content terms without stop words)
- Temporal window (recent, today, last week, ...)

Pure: the only external input is the clock, which is injectable.

Example:
    >>> parser = QueryParser()
    >>> query = parser.parse("Who works with Acme?")
    >>> query.query_type
    <QueryType.RELATIONAL: 'relational'>
    >>> query.entities
    ('Acme',)
"""

import re
import structlog
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Tuple

from .models import QueryType, StructuredQuery, TemporalWindow

log = structlog.get_logger()


# Ordered by priority: the first family with a matching pattern wins.
# Patterns are matched against the trimmed, lowercased query.
QUERY_TYPE_PATTERNS: List[Tuple[QueryType, List[str]]] = [
    (QueryType.FACTUAL, [
        r"^what (is|are|was|were)",
        r"^tell me about",
        r"^explain",
        r"^describe",
        r"^define",
    ]),
    (QueryType.RELATIONAL, [
        r"^who (works|worked|collaborates|collaborated) with",
        r"^what.*related to",
        r"^find (people|connections|relationships)",
        r"^who knows about",
        r"^experts? (on|in|for)",
    ]),
    (QueryType.TEMPORAL, [
        r"^recent",
        r"^latest",
        r"^last (week|month|year|day)",
        r"^(today|yesterday|this week)",
        r"^updates? (from|since)",
        r"^what.*recently",
    ]),
    (QueryType.EXPLORATORY, [
        r"^show me (everything|all)",
        r"^explore",
        r"^browse",
        r"^discover",
    ]),
]

_COMPILED_PATTERNS: List[Tuple[QueryType, List[re.Pattern]]] = [
    (query_type, [re.compile(p) for p in patterns])
    for query_type, patterns in QUERY_TYPE_PATTERNS
]

STOP_WORDS = frozenset({
    "a", "an", "and", "are", "as", "at", "be", "by", "for", "from",
    "has", "he", "in", "is", "it", "its", "of", "on", "that", "the",
    "to", "was", "were", "will", "with", "who", "what", "when", "where", "how",
    "why", "about", "tell", "me", "find", "show", "get",
})

MIN_KEYWORD_LENGTH = 3

_QUOTED_RE = re.compile(r'"([^"]+)"')
_PROPER_NOUN_RE = re.compile(r"^[A-Z][a-z]+")
_NON_WORD_RE = re.compile(r"[^\w]")
_TRAILING_PUNCT_RE = re.compile(r"[^\w]+$")


def _start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def _end_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=23, minute=59, second=59, microsecond=999999)


def _recent(now: datetime) -> Tuple[datetime, datetime]:
    return now - timedelta(days=7), now


def _today(now: datetime) -> Tuple[datetime, datetime]:
    return _start_of_day(now), now


def _yesterday(now: datetime) -> Tuple[datetime, datetime]:
    day = now - timedelta(days=1)
    return _start_of_day(day), _end_of_day(day)


def _this_week(now: datetime) -> Tuple[datetime, datetime]:
    monday = now - timedelta(days=now.weekday())
    return _start_of_day(monday), now


def _last_week(now: datetime) -> Tuple[datetime, datetime]:
    monday = now - timedelta(days=now.weekday() + 7)
    sunday = monday + timedelta(days=6)
    return _start_of_day(monday), _end_of_day(sunday)


def _last_month(now: datetime) -> Tuple[datetime, datetime]:
    first_of_this_month = _start_of_day(now.replace(day=1))
    last_of_previous = first_of_this_month - timedelta(days=1)
    return _start_of_day(last_of_previous.replace(day=1)), _end_of_day(last_of_previous)


# Checked in this order; the first phrase contained in the query wins
TEMPORAL_PATTERNS: List[Tuple[str, Callable[[datetime], Tuple[datetime, datetime]]]] = [
    ("recent", _recent),
    ("today", _today),
    ("yesterday", _yesterday),
    ("this week", _this_week),
    ("last week", _last_week),
    ("last month", _last_month),
]


def detect_query_type(normalized: str) -> QueryType:
    """Return the first query family whose patterns match, else SEMANTIC."""
    for query_type, patterns in _COMPILED_PATTERNS:
        if any(p.search(normalized) for p in patterns):
            return query_type
    return QueryType.SEMANTIC


def _unique(items: List[str]) -> Tuple[str, ...]:
    # dict preserves insertion order
    return tuple(dict.fromkeys(items))


def extract_entities(text: str) -> Tuple[str, ...]:
    """
    Extract entity candidates from the original (cased) text.

    Quoted phrases are taken verbatim. Every word after the first that starts
    with a capital followed by lowercase letters is a proper-noun candidate.
    """
    entities = [m.strip() for m in _QUOTED_RE.findall(text) if m.strip()]

    words = text.split()
    for word in words[1:]:
        candidate = _TRAILING_PUNCT_RE.sub("", word)
        if len(candidate) >= 2 and _PROPER_NOUN_RE.match(candidate):
            entities.append(candidate)

    return _unique(entities)


def extract_keywords(normalized: str) -> Tuple[str, ...]:
    """Lowercase content terms, stop words and short tokens removed."""
    keywords = []
    for word in normalized.lower().split():
        token = _NON_WORD_RE.sub("", word)
        if len(token) < MIN_KEYWORD_LENGTH or token in STOP_WORDS:
            continue
        keywords.append(token)
    return _unique(keywords)


def extract_temporal(normalized: str, now: datetime) -> Optional[TemporalWindow]:
    """Resolve the first relative-time phrase found into a concrete window."""
    for label, resolve in TEMPORAL_PATTERNS:
        if label in normalized:
            start, end = resolve(now)
            return TemporalWindow(start=start, end=end, label=label)
    return None


_INTENT_TEMPLATES: Dict[QueryType, str] = {
    QueryType.FACTUAL: "Find factual information about: {entities}",
    QueryType.RELATIONAL: "Find relationships and connections for: {entities}",
    QueryType.TEMPORAL: "Find recent activity related to: {keywords}",
    QueryType.EXPLORATORY: "Explore all information about: {entities}",
    QueryType.SEMANTIC: "Find semantically similar content for: {keywords}",
}


def determine_intent(
    query_type: QueryType,
    entities: Tuple[str, ...],
    keywords: Tuple[str, ...]
) -> str:
    template = _INTENT_TEMPLATES[query_type]
    return template.format(
        entities=", ".join(entities) if entities else "general",
        keywords=", ".join(keywords[:3]),
    )


def calculate_confidence(
    query_type: QueryType,
    entities: Tuple[str, ...],
    keywords: Tuple[str, ...]
) -> float:
    """
    Confidence in the parse.

    Formula:
        0.5 base
        + 0.2 if a specific query family matched
        + 0.15 per entity, up to two
        + 0.1 if at least two keywords
        clamped to 1.0
    """
    confidence = 0.5
    if query_type != QueryType.SEMANTIC:
        confidence += 0.2
    confidence += 0.15 * min(len(entities), 2)
    if len(keywords) >= 2:
        confidence += 0.1
    return min(round(confidence, 4), 1.0)


class QueryParser:
    """
    Parser for free-text retrieval queries.

    Args:
        now_fn: Clock used to resolve temporal phrases (default: datetime.now,
                local time). Inject a fixed clock in tests.
    """

    def __init__(self, now_fn: Optional[Callable[[], datetime]] = None):
        self.now_fn = now_fn or datetime.now

    def parse(self, text: str) -> StructuredQuery:
        """
        Parse a query. Never raises: unknown phrasing falls back to SEMANTIC.

        Args:
            text: Free-text query

        Returns:
            StructuredQuery
        """
        text = text or ""
        normalized = text.strip().lower()

        query_type = detect_query_type(normalized)
        entities = extract_entities(text)
        keywords = extract_keywords(normalized)
        temporal_window = extract_temporal(normalized, self.now_fn())

        query = StructuredQuery(
            original_text=text,
            query_type=query_type,
            entities=entities,
            keywords=keywords,
            intent=determine_intent(query_type, entities, keywords),
            temporal_window=temporal_window,
            confidence=calculate_confidence(query_type, entities, keywords),
        )

        log.debug(
            "Query parsed",
            query_type=query_type.value,
            entities=list(entities),
            keywords=list(keywords[:5]),
            temporal=temporal_window.label if temporal_window else None,
            confidence=query.confidence,
        )

        return query


def parse_query(text: str, now: Optional[datetime] = None) -> StructuredQuery:
    """Convenience wrapper around QueryParser.parse with an optional fixed clock."""
    parser = QueryParser(now_fn=(lambda: now) if now is not None else None)
    return parser.parse(text)
