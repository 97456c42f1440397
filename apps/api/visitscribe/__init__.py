"""Visit recording transcription, summarization and delivery service."""

__version__ = "0.3.0"
