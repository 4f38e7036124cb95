"""Document store adapters and the shared unit-of-work core."""
