"""Vault RAG service: grounded Q&A over a research vault's own content."""

__version__ = "0.1.0"
