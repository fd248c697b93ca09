"""Command-line interface for the PDF harvester."""
