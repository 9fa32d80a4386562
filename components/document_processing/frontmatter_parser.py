"""YAML frontmatter extraction for memory notes."""

import logging
import re
from pathlib import Path
from typing import Any, List, Optional, Union

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

# Frontmatter must open on the very first line of the file.
FRONTMATTER_PATTERN = re.compile(r"^---\r?\n(.*?)\r?\n---", re.DOTALL)


class NoteMetadata(BaseModel):
    """The structured header of a memory note."""

    tags: List[str] = Field(default_factory=list, description="Declared tags")
    description: str = Field(default="", description="Free-text description")


def _coerce_tags(raw_tags: Any) -> List[str]:
    if raw_tags is None:
        return []
    if isinstance(raw_tags, (list, tuple)):
        return [str(tag) for tag in raw_tags if tag is not None]
    return [str(raw_tags)]


def parse_frontmatter_text(content: str) -> Optional[NoteMetadata]:
    """Parse the frontmatter block at the start of a note's text.

    Returns:
        The note's metadata, or None when there is no valid frontmatter.
    """
    match = FRONTMATTER_PATTERN.match(content)
    if not match:
        return None

    frontmatter = yaml.safe_load(match.group(1))
    # Empty blocks and non-mapping YAML carry no metadata.
    if not isinstance(frontmatter, dict):
        return None

    description = frontmatter.get("description") or ""
    return NoteMetadata(
        tags=_coerce_tags(frontmatter.get("tags")),
        description=str(description),
    )


def parse_frontmatter(file_path: Union[str, Path]) -> Optional[NoteMetadata]:
    """Read a note from disk and extract its tags and description.

    Invalid YAML is reported as a warning and treated as missing metadata.
    Bytes that are not valid UTF-8 are replaced rather than rejected. Errors
    reading the file itself propagate to the caller.
    """
    with open(file_path, "r", encoding="utf-8", errors="replace") as f:
        content = f.read()

    try:
        return parse_frontmatter_text(content)
    except yaml.YAMLError as e:
        logger.warning(f"Invalid YAML in {file_path}: {e}")
        return None
