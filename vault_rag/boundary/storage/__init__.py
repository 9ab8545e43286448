"""Object storage adapters: S3 file download and text extraction."""

from vault_rag.boundary.storage.s3_client import S3FileStore
from vault_rag.boundary.storage.file_extractor import FileExtractor

__all__ = ["S3FileStore", "FileExtractor"]
