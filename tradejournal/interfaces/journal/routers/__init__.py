"""Route modules of the journal API, one per feature area."""
