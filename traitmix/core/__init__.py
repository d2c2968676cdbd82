"""Core models and errors shared across traitmix."""
