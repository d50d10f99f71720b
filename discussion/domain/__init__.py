"""Domain layer: entities, value objects and services of a post view."""
