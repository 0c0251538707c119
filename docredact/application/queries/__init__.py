"""Read-side queries over the job registry."""
