"""Application layer: pipeline orchestration, job registry, commands and queries."""
