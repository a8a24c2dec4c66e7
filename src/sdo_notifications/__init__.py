"""SDO Notifications - cooperate with the Skip The DevOps platform."""

__version__ = "0.1.0"

from .hub import SdoNotifications
from .providers.credentials import CredentialProvider
from .providers.base import Provider

__all__ = ["SdoNotifications", "CredentialProvider", "Provider"]
