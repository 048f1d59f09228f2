"""Domain layer for plansmith: pure models and functions, no I/O."""
