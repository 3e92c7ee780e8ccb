"""Document retriever - keyword-overlap scoring over recent documents."""

from collections.abc import Sequence

from backend.docchat.db.repositories import DocumentRepository
from backend.docchat.models.docs import Document, ScoredSource, Source, section_text
from backend.docchat.utils.metrics import PrometheusPipelineMetrics

TITLE_WEIGHT = 3
BODY_WEIGHT = 1
PHRASE_WEIGHT = 2

SECTION_SNIPPET_CHARS = 2000
BODY_SNIPPET_CHARS = 3000


def tokenize_query(query: str) -> list[str]:
    """Lowercase whitespace-separated terms longer than two characters."""
    return [term for term in query.lower().split() if len(term) > 2]


def score_document(doc: Document, query: str, terms: Sequence[str] | None = None) -> int:
    """Keyword-overlap score of a document for a query.

    Per term: +3 if the title or the original filename contains it, +1 if
    the body contains it, +2 if the body contains the whole query phrase.
    """
    if terms is None:
        terms = tokenize_query(query)

    title = doc.title.lower()
    filename = doc.filename.lower()
    body = doc.body_text().lower()
    phrase = query.strip().lower()
    phrase_in_body = bool(phrase) and phrase in body

    score = 0
    for term in terms:
        if term in title or term in filename:
            score += TITLE_WEIGHT
        if term in body:
            score += BODY_WEIGHT
        if phrase_in_body:
            score += PHRASE_WEIGHT
    return score


def select_snippet(doc: Document, terms: Sequence[str]) -> str:
    """Pick the section containing the most distinct query terms.

    Ties keep the earlier section. Falls back to the head of the body when
    no section matches any term.
    """
    best_text: str | None = None
    best_hits = 0

    for section in doc.sections:
        text = section_text(section)
        lowered = text.lower()
        hits = sum(1 for term in set(terms) if term in lowered)
        if hits > best_hits:
            best_text, best_hits = text, hits

    if best_text is not None:
        return best_text[:SECTION_SNIPPET_CHARS]
    return doc.body_text()[:BODY_SNIPPET_CHARS]


def rank_sources(
    documents: Sequence[Document],
    query: str,
    *,
    top_k: int = 8,
    min_score: int = 0,
) -> list[ScoredSource]:
    """Score and rank documents for a query.

    Pure function: no I/O, same input gives the same output.

    Strategy:
        1. Score every document (see score_document)
        2. Stable sort by descending score, so ties keep input (recency) order
        3. Drop sources below min_score; the default 0 keeps zero-score
           documents so the model always receives some context
        4. Keep the first top_k

    Args:
        documents: Candidate documents, newest first
        query: Free-text query
        top_k: Maximum number of sources
        min_score: Minimum score for a source to be kept

    Returns:
        ScoredSource list sorted by non-increasing score
    """
    terms = tokenize_query(query)

    scored = [
        ScoredSource(
            id=doc.id,
            title=doc.title,
            snippet=select_snippet(doc, terms),
            score=score_document(doc, query, terms),
        )
        for doc in documents
    ]

    ranked = sorted(scored, key=lambda source: -source.score)
    ranked = [source for source in ranked if source.score >= min_score]
    return ranked[:top_k]


class Retriever:
    """Fetches recent documents and ranks them for a query.

    Read-only with respect to the document store.
    """

    def __init__(
        self,
        documents: DocumentRepository,
        *,
        candidate_limit: int = 20,
        top_k: int = 8,
        min_score: int = 0,
    ) -> None:
        self._documents = documents
        self.candidate_limit = candidate_limit
        self.top_k = top_k
        self.min_score = min_score
        self._metrics = PrometheusPipelineMetrics()

    async def search(self, query: str, *, top_k: int | None = None) -> list[ScoredSource]:
        """Ranked sources with scores."""
        candidates = await self._documents.list_recent(self.candidate_limit)
        return rank_sources(
            candidates,
            query,
            top_k=self.top_k if top_k is None else top_k,
            min_score=self.min_score,
        )

    async def retrieve(self, query: str) -> list[Source]:
        """Ranked sources with the score stripped."""
        sources = [scored.to_source() for scored in await self.search(query)]
        self._metrics.record_sources(len(sources))
        return sources
