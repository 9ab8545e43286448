"""Pydantic models shared across layers."""
