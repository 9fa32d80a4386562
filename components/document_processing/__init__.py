"""Document processing component.

This component reads memory notes from disk: it enumerates the markdown
files under the brain directory and extracts the tags and description
declared in each note's YAML frontmatter.
"""

from .frontmatter_parser import NoteMetadata, parse_frontmatter, parse_frontmatter_text
from .note_finder import NoteDirectoryError, find_markdown_files, is_note_file

__all__ = [
    # Frontmatter
    "NoteMetadata",
    "parse_frontmatter",
    "parse_frontmatter_text",
    # Enumeration
    "NoteDirectoryError",
    "find_markdown_files",
    "is_note_file",
]
