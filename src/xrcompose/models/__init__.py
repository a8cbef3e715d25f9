"""Pydantic models and object wrappers for composite and composed resources."""
