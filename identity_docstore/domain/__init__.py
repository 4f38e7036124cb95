"""Domain layer: identity aggregate, index records and ports."""
