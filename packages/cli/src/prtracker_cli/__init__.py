"""Command-line interface for prtracker."""
