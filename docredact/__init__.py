"""Document field extraction, schema matching and redaction backend."""

__version__ = "0.1.0"
