"""Command line interface for the skills wallet."""
