"""Command line interface for tshealth."""
