"""Command-line and HTTP surfaces."""
