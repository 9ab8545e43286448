"""Boundary layer: database, model providers, and object storage adapters."""
