"""Command-line entry points for ffdsculpt."""
