"""Command-line interface for uigen workspaces."""
