"""
Context and citation formatting.

Turns ranked chunks into a numbered grounding block for the model and a
parallel list of display citations.

Dependencies: vault_rag.models
System role: Citation formatting business logic
"""

from vault_rag.models.citation import Citation
from vault_rag.models.retrieval import RetrievedChunk

NO_RELEVANT_CONTENT = "No relevant content found in this vault."
DEFAULT_SNIPPET_LENGTH = 150


def chunk_title(chunk: RetrievedChunk) -> str:
    """Display title from denormalized metadata, else a short type/id label."""
    meta = chunk.metadata or {}
    return meta.get("title") or meta.get("file_name") or f"{chunk.source_type} {chunk.source_id[:8]}"


def chunk_author(chunk: RetrievedChunk) -> str:
    meta = chunk.metadata or {}
    return meta.get("author_name") or meta.get("author_email") or ""


def format_context(
    chunks: list[RetrievedChunk],
    snippet_length: int = DEFAULT_SNIPPET_LENGTH,
) -> tuple[str, list[Citation]]:
    """
    Format retrieved chunks into prompt context and citations.

    Source numbers follow input order, so [Source N] in the answer maps to
    citations[N - 1].

    Args:
        chunks: Ranked chunks
        snippet_length: Maximum citation snippet length

    Returns:
        tuple[str, list[Citation]]: Context text and citations
    """
    if not chunks:
        return NO_RELEVANT_CONTENT, []

    lines: list[str] = []
    citations: list[Citation] = []

    for number, chunk in enumerate(chunks, start=1):
        title = chunk_title(chunk)
        author = chunk_author(chunk)
        by_author = f" by {author}" if author else ""

        lines.append(f'[Source {number}] ({chunk.source_type}) "{title}"{by_author}')
        lines.append(chunk.content)
        lines.append("")

        citations.append(
            Citation(
                source_type=chunk.source_type,
                source_id=chunk.source_id,
                title=title,
                snippet=chunk.content[:snippet_length],
            )
        )

    return "\n".join(lines), citations
