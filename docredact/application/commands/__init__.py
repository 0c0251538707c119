"""Commands that change job state."""
