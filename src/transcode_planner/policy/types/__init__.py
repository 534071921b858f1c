"""Option and plan types for transcode policies."""
