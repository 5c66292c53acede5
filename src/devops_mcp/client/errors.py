"""Errors raised by the Azure DevOps client."""


class DevOpsRequestError(RuntimeError):
    """Raised when an Azure DevOps request fails or returns an unusable payload."""
