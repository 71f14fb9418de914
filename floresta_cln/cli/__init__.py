"""Command-line interface for floresta-cln."""
