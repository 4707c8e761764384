"""Domain layer: entities and business rules independent of persistence."""
