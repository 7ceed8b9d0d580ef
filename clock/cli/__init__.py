"""CLI module for clock."""
