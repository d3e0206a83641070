"""Application entry points and command-line interface."""
