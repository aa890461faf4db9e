"""Schemas - Pydantic models for entities read from the store and operation results."""
