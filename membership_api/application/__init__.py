"""Application layer: DTOs, ports and the resolver/cache-aside/aggregation services."""
