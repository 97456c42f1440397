"""Pipeline services."""
