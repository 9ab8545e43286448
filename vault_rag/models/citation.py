"""
Citation domain model.

Display-ready reference pointing back to a grounding chunk.

Dependencies: pydantic
System role: Citation data structure
"""

from pydantic import BaseModel, Field


class Citation(BaseModel):
    """Citation model for source attribution."""

    source_type: str = Field(description="source, annotation, or file")
    source_id: str = Field(description="ID of the cited content item")
    title: str = Field(description="Display title of the cited item")
    snippet: str = Field(description="Leading excerpt of the chunk content")
