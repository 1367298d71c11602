"""Command modules for the biceplab CLI."""
