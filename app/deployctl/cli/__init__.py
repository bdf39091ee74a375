"""Command line interface for deployctl."""
