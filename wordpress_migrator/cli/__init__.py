"""Command-line interface for the WordPress content migration tool."""
