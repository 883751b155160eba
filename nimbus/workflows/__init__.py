"""Config-driven operations used by the CLI."""
