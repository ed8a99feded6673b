"""Domain layer: environments, connection parameters and exceptions."""
