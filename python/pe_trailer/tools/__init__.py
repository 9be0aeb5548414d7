"""Command line tools for pe-trailer."""
