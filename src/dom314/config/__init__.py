"""Configuration loading and logging setup for dom314."""
