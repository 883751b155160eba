"""Service wrappers, configuration and credentials."""
