"""zapscan command line interface."""
