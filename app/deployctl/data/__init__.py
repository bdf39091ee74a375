"""Bundled data files for deployctl."""
