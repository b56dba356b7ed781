"""Command line interface for tracing match expressions."""
