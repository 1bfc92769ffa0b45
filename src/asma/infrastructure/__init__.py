"""Adapters for catalog sources and state storage."""
