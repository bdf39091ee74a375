"""Core engine: journal, execution mode, orchestration context."""
