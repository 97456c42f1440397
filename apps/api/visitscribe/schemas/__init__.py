"""Pydantic request, response and record schemas."""
