"""Command-line interface for the certstudy engine."""
