"""Configuration — frozen section models, settings sources, and logging."""
