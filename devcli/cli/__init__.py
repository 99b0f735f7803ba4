"""Command line interface for devcli."""
