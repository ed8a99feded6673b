"""Infrastructure: Redis cache adapter and Azure DevOps HTTP client."""
