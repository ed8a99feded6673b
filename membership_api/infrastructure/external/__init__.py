"""External services: Azure DevOps identity API client."""

from membership_api.infrastructure.external.azure_devops_client import AzureDevOpsClient

__all__ = ["AzureDevOpsClient"]
