"""FastAPI application exposing the study engine."""
