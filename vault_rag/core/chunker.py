"""
Boundary-aware text chunker.

Splits text into overlapping windows, preferring to end each window at a
paragraph break, then a sentence break, then a hard cut. Builds canonical
text representations for each kind of vault content before chunking.

Dependencies: vault_rag.models
System role: First stage of the indexing pipeline
"""

from typing import Any

from vault_rag.core.exceptions import ValidationError
from vault_rag.models.chunk import Chunk
from vault_rag.models.content import AnnotationItem, FileItem, SourceItem, SourceType

DEFAULT_CHUNK_SIZE = 1500  # ~375 tokens
DEFAULT_CHUNK_OVERLAP = 200  # ~50 tokens

# A boundary is only used when it falls past this share of the window.
MIN_BOUNDARY_RATIO = 0.3

PARAGRAPH_BREAK = "\n\n"
SENTENCE_BREAK = ". "


def _find_break(text: str, start: int, end: int, chunk_size: int) -> int | None:
    """Return the window end after the latest usable boundary, if any."""
    floor = start + chunk_size * MIN_BOUNDARY_RATIO
    for marker in (PARAGRAPH_BREAK, SENTENCE_BREAK):
        position = text.rfind(marker, start, end)
        if position > floor:
            return position + len(marker)
    return None


def chunk_text(
    text: str,
    metadata: dict[str, Any] | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_CHUNK_OVERLAP,
) -> list[Chunk]:
    """
    Split text into overlapping chunks by paragraph/sentence boundaries.

    Args:
        text: Raw text, any line endings
        metadata: Metadata copied onto every chunk
        chunk_size: Maximum window length in characters
        overlap: Characters repeated at the head of the next window

    Returns:
        list[Chunk]: Chunks with sequential indices starting at 0

    Raises:
        ValidationError: When overlap is not smaller than chunk_size
    """
    if chunk_size <= 0 or overlap < 0 or overlap >= chunk_size:
        raise ValidationError(
            "chunk_overlap must be non-negative and smaller than chunk_size",
            field="chunk_overlap",
            details={"chunk_size": chunk_size, "chunk_overlap": overlap},
        )

    metadata = metadata or {}
    if not text or not text.strip():
        return []

    cleaned = text.replace("\r\n", "\n").strip()
    length = len(cleaned)

    if length <= chunk_size:
        return [Chunk(content=cleaned, index=0, metadata=dict(metadata))]

    chunks: list[Chunk] = []
    start = 0
    while start < length:
        end = min(start + chunk_size, length)
        if end < length:
            end = _find_break(cleaned, start, end, chunk_size) or end

        content = cleaned[start:end].strip()
        if content:
            chunks.append(Chunk(content=content, index=len(chunks), metadata=dict(metadata)))

        if end >= length:
            break
        start = max(end - overlap, start + 1)

    return chunks


def build_source_text(source: SourceItem) -> str:
    """Canonical text for a saved source: title, locator, descriptive fields."""
    parts: list[str] = []
    if source.title:
        parts.append(f"Title: {source.title}")
    parts.append(f"URL: {source.url}")

    meta = source.metadata or {}
    for key, label in (
        ("description", "Description"),
        ("abstract", "Abstract"),
        ("authors", "Authors"),
        ("journal", "Journal"),
        ("year", "Year"),
        ("notes", "Notes"),
    ):
        if meta.get(key):
            parts.append(f"{label}: {meta[key]}")
    return "\n".join(parts)


def chunk_source(
    source: SourceItem,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_CHUNK_OVERLAP,
) -> list[Chunk]:
    """Create chunks from a source record."""
    authors = (source.metadata or {}).get("authors")
    metadata = {
        "source_type": SourceType.SOURCE.value,
        "source_id": str(source.id),
        "title": source.title or source.url,
        "url": source.url,
        "created_by": str(source.created_by) if source.created_by else None,
    }
    if authors:
        metadata["author_name"] = authors if isinstance(authors, str) else ", ".join(map(str, authors))
    return chunk_text(build_source_text(source), metadata, chunk_size, overlap)


def chunk_annotation(
    annotation: AnnotationItem,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_CHUNK_OVERLAP,
) -> list[Chunk]:
    """Create chunks from an annotation; the title names its parent source."""
    metadata = {
        "source_type": SourceType.ANNOTATION.value,
        "source_id": str(annotation.id),
        "parent_source_id": str(annotation.source_id),
        "title": f'Annotation on "{annotation.source_title or "source"}"',
        "author_name": annotation.author_name,
        "author_email": annotation.author_email,
        "created_by": str(annotation.created_by) if annotation.created_by else None,
    }
    return chunk_text(annotation.content, metadata, chunk_size, overlap)


def chunk_file(
    file: FileItem,
    text_content: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_CHUNK_OVERLAP,
) -> list[Chunk]:
    """Create chunks from a file's extracted text (or its placeholder description)."""
    metadata = {
        "source_type": SourceType.FILE.value,
        "source_id": str(file.id),
        "title": file.file_name,
        "file_name": file.file_name,
        "uploaded_by": str(file.uploaded_by) if file.uploaded_by else None,
    }
    return chunk_text(text_content, metadata, chunk_size, overlap)
