"""Related-note discovery by shared tags and description keywords."""

import logging
from typing import Iterable, List, Optional, Sequence

from components.index_store import IndexEntry
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

MIN_OVERLAP = 2
TAG_WEIGHT = 2
KEYWORD_WEIGHT = 1


class RelatedMatch(BaseModel):
    """An indexed note that shares enough terms with a reference note."""

    path: str
    entry: IndexEntry
    score: int
    tag_overlap: int
    keyword_overlap: int
    shared_tags: List[str] = Field(default_factory=list)
    shared_keywords: List[str] = Field(default_factory=list)


def _unique(items: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(items))


def match_related(
    reference_tags: Sequence[str],
    reference_keywords: Sequence[str],
    entries: Iterable[IndexEntry],
    min_overlap: int = MIN_OVERLAP,
    tag_weight: int = TAG_WEIGHT,
    keyword_weight: int = KEYWORD_WEIGHT,
    exclude_path: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[RelatedMatch]:
    """
    Score entries by the tags and keywords they share with a reference note.

    An entry qualifies when it shares at least ``min_overlap`` tags or at
    least ``min_overlap`` keywords; a single shared term is treated as noise.
    Tags weigh more than keywords because they are curated rather than
    derived from free text.

    Args:
        reference_tags: Tags of the note to find relatives for.
        reference_keywords: Description keywords of that note.
        entries: Candidate index entries.
        min_overlap: Shared tags or keywords needed to qualify.
        tag_weight: Score per shared tag.
        keyword_weight: Score per shared keyword.
        exclude_path: Path to leave out, normally the reference note itself.
        limit: Maximum number of matches to return.

    Returns:
        Qualifying matches by descending score, ties ordered by path.
    """
    tags = _unique(reference_tags)
    keywords = _unique(reference_keywords)

    matches: List[RelatedMatch] = []
    for entry in entries:
        if exclude_path is not None and entry.path == exclude_path:
            continue

        entry_tags = set(entry.tags)
        entry_keywords = set(entry.description_keywords)
        shared_tags = [tag for tag in tags if tag in entry_tags]
        shared_keywords = [kw for kw in keywords if kw in entry_keywords]

        if len(shared_tags) < min_overlap and len(shared_keywords) < min_overlap:
            continue

        matches.append(
            RelatedMatch(
                path=entry.path,
                entry=entry,
                score=len(shared_tags) * tag_weight
                + len(shared_keywords) * keyword_weight,
                tag_overlap=len(shared_tags),
                keyword_overlap=len(shared_keywords),
                shared_tags=shared_tags,
                shared_keywords=shared_keywords,
            )
        )

    matches.sort(key=lambda match: (-match.score, match.path))
    logger.debug(f"Found {len(matches)} related entries")
    if limit is not None:
        matches = matches[: max(limit, 0)]
    return matches
