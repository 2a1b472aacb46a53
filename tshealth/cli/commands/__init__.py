"""CLI commands for tshealth."""
