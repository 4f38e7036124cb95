"""Infrastructure layer: configuration, logging and document store adapters."""
