"""Data transfer objects returned by queries."""
