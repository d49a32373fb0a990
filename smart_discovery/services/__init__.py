"""Service layer: catalog clients and the recommendation engine."""
