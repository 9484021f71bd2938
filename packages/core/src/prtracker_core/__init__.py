"""Ingestion and review-workflow engine for prtracker."""
