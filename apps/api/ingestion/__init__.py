"""YouTube ingestion package."""
