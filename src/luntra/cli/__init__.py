"""Command line interface for luntra."""
