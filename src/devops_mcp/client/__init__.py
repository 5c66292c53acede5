"""Azure DevOps REST client."""

from .client import DevOpsClient
from .errors import DevOpsRequestError
from .utils import build_auth_headers, mask_secret

__all__ = [
    "DevOpsClient",
    "DevOpsRequestError",
    "build_auth_headers",
    "mask_secret",
]
