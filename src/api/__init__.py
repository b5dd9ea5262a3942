"""FastAPI service exposing the assembled exam content."""
