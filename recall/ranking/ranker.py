"""
Result Ranker
=============

Scores vector and graph hits, then merges them into a single ranked list.

Vector hits:
    combined = similarity * w.vector
             + recency(created_at) * w.recency
             + (importance / 10) * w.importance
             + entity_overlap(content, entities) * w.entity_overlap

Graph hits:
    combined = graph_relevance * w.graph
             + recency(last_seen) * w.recency
             + entity_overlap * w.entity_overlap

Merge: concatenate -> deduplicate (first wins) -> stable sort by combined
-> diversity penalty -> stable re-sort.

All functions are pure; ``now`` is a parameter so tests can pin the clock.
"""

from datetime import datetime
from typing import Dict, List, Optional, Sequence

from recall.config.settings import RetrievalWeights
from recall.query.models import StructuredQuery
from recall.storage.models import GraphHit, GraphNode, MemoryItem, VectorHit

from .models import RankedResult, ResultMetadata, ResultSource

DEFAULT_WEIGHTS = RetrievalWeights()

# (max age in days, score); anything older scores RECENCY_FLOOR
RECENCY_TIERS = [
    (1, 1.0),
    (7, 0.9),
    (30, 0.7),
    (90, 0.5),
]
RECENCY_FLOOR = 0.3
RECENCY_UNKNOWN = 0.5

DEFAULT_IMPORTANCE = 5
DEFAULT_GRAPH_SCORE = 0.5
FREQUENCY_NORMALIZER = 100.0
EXACT_ENTITY_OVERLAP = 1.0
PARTIAL_ENTITY_OVERLAP = 0.5

DIVERSITY_FREE_SLOTS = 3
DIVERSITY_PENALTY = 0.95
DEDUP_CONTENT_PREFIX = 50


def _as_aware(moment: datetime) -> datetime:
    # Naive timestamps are read as local time
    return moment if moment.tzinfo is not None else moment.astimezone()


def age_in_days(timestamp: datetime, now: datetime) -> float:
    return (_as_aware(now) - _as_aware(timestamp)).total_seconds() / 86400.0


def recency_score(timestamp: Optional[datetime], now: Optional[datetime] = None) -> float:
    """
    Step-function recency: 1.0 (<1d), 0.9 (<7d), 0.7 (<30d), 0.5 (<90d), else 0.3.

    Unknown timestamps score 0.5.
    """
    if timestamp is None:
        return RECENCY_UNKNOWN
    age = age_in_days(timestamp, now or datetime.now())
    for max_age, score in RECENCY_TIERS:
        if age < max_age:
            return score
    return RECENCY_FLOOR


def find_matched_entities(text: str, entities: Sequence[str]) -> List[str]:
    lowered = text.lower()
    return [e for e in entities if e.lower() in lowered]


def find_matched_keywords(text: str, keywords: Sequence[str]) -> List[str]:
    lowered = text.lower()
    return [k for k in keywords if k in lowered]


def entity_overlap(text: str, entities: Sequence[str]) -> float:
    """Fraction of query entities found (case-insensitively) in ``text``."""
    if not entities:
        return 0.0
    return len(find_matched_entities(text, entities)) / len(entities)


def graph_relevance(node: GraphNode, query: StructuredQuery) -> float:
    """
    Graph relevance of a node.

    Formula (entity nodes):
        0.7 * min(frequency / 100, 1.0) + 0.3 * name_match

    where name_match is 1 when any query keyword is a substring of the node
    name. A missing frequency counts as 0.5; unnamed nodes score 0.5.
    """
    if not node.is_entity:
        return DEFAULT_GRAPH_SCORE

    if node.frequency:
        frequency_score = min(node.frequency / FREQUENCY_NORMALIZER, 1.0)
    else:
        frequency_score = DEFAULT_GRAPH_SCORE

    name = node.name.lower()
    name_match = 1.0 if any(k in name for k in query.keywords) else 0.0

    return 0.7 * frequency_score + 0.3 * name_match


def relevance_reason(similarity: float, recency: float, overlap: float) -> str:
    reasons = []
    if similarity > 0.8:
        reasons.append("Highly similar content")
    elif similarity > 0.6:
        reasons.append("Semantically related")
    if recency > 0.8:
        reasons.append("Recent activity")
    if overlap > 0.5:
        reasons.append("Matching entities")
    return ", ".join(reasons) if reasons else "Relevant match"


def rank_vector_results(
    hits: Sequence[VectorHit],
    query: StructuredQuery,
    weights: RetrievalWeights = DEFAULT_WEIGHTS,
    now: Optional[datetime] = None
) -> List[RankedResult]:
    """Score each vector hit independently, preserving input order."""
    now = now or datetime.now()
    ranked = []

    for hit in hits:
        similarity = hit.similarity or 0.0
        recency = recency_score(hit.created_at, now)
        importance = (hit.importance or DEFAULT_IMPORTANCE) / 10.0
        overlap = entity_overlap(hit.content, query.entities)

        combined = (
            similarity * weights.vector
            + recency * weights.recency
            + importance * weights.importance
            + overlap * weights.entity_overlap
        )

        ranked.append(RankedResult(
            source=ResultSource.VECTOR,
            content=MemoryItem.from_hit(hit),
            scores={
                "vector": similarity,
                "recency": recency,
                "importance": importance,
                "entity_overlap": overlap,
                "combined": combined,
            },
            metadata=ResultMetadata(
                matched_entities=find_matched_entities(hit.content, query.entities),
                matched_keywords=find_matched_keywords(hit.content, query.keywords),
                relevance_reason=relevance_reason(similarity, recency, overlap),
            ),
        ))

    return ranked


def rank_graph_results(
    hits: Sequence[GraphHit],
    query: StructuredQuery,
    weights: RetrievalWeights = DEFAULT_WEIGHTS,
    now: Optional[datetime] = None
) -> List[RankedResult]:
    """Score each graph hit independently, preserving input order."""
    now = now or datetime.now()
    query_entities = {e.lower() for e in query.entities}
    ranked = []

    for hit in hits:
        node = hit.node
        name = node.name or ""

        graph_score = graph_relevance(node, query)
        overlap = EXACT_ENTITY_OVERLAP if name and name.lower() in query_entities else PARTIAL_ENTITY_OVERLAP
        recency = recency_score(node.last_seen, now)

        combined = (
            graph_score * weights.graph
            + recency * weights.recency
            + overlap * weights.entity_overlap
        )

        ranked.append(RankedResult(
            source=ResultSource.GRAPH,
            content=hit,
            scores={
                "graph": graph_score,
                "recency": recency,
                "entity_overlap": overlap,
                "combined": combined,
            },
            metadata=ResultMetadata(
                matched_entities=[name] if name else [],
                matched_keywords=find_matched_keywords(name, query.keywords) if name else [],
                relevance_reason=f"Graph entity: {name or 'Unknown'} ({hit.label})",
            ),
        ))

    return ranked


def sort_by_combined(results: Sequence[RankedResult]) -> List[RankedResult]:
    # sorted() is stable with reverse=True: ties keep discovery order
    return sorted(results, key=lambda r: r.combined, reverse=True)


def deduplicate_results(results: Sequence[RankedResult]) -> List[RankedResult]:
    """Drop results whose identity key was already seen; first occurrence wins."""
    seen = set()
    deduped = []
    for result in results:
        key = result.dedup_key()
        if key in seen:
            continue
        seen.add(key)
        deduped.append(result)
    return deduped


def apply_diversity_penalty(results: Sequence[RankedResult]) -> List[RankedResult]:
    """
    Penalise over-represented sources.

    Walking the sorted list, once a source already has DIVERSITY_FREE_SLOTS
    results emitted, every further result from that source gets its combined
    score multiplied by DIVERSITY_PENALTY. The list is then re-sorted.
    """
    source_count: Dict[ResultSource, int] = {source: 0 for source in ResultSource}
    adjusted = []

    for result in results:
        if source_count[result.source] >= DIVERSITY_FREE_SLOTS:
            result = result.with_combined(
                result.combined * DIVERSITY_PENALTY,
                diversity_penalty=DIVERSITY_PENALTY,
            )
        source_count[result.source] += 1
        adjusted.append(result)

    return sort_by_combined(adjusted)


def merge_and_rank(
    vector_results: Sequence[RankedResult],
    graph_results: Sequence[RankedResult],
    weights: RetrievalWeights = DEFAULT_WEIGHTS
) -> List[RankedResult]:
    """
    Merge independently ranked lists into one.

    ``weights`` is accepted for symmetry with the per-source rankers; the
    per-factor weighting has already been applied at this point.
    """
    deduped = deduplicate_results([*vector_results, *graph_results])
    return apply_diversity_penalty(sort_by_combined(deduped))


def filter_by_threshold(results: Sequence[RankedResult], min_combined: float) -> List[RankedResult]:
    return [r for r in results if r.combined >= min_combined]


def top_n(results: Sequence[RankedResult], n: int) -> List[RankedResult]:
    return list(results[:n])
