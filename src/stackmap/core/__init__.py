"""Core data model, identity and logging helpers."""
