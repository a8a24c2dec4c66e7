"""Providers reacting to the Skip The DevOps endpoints."""

from .base import Provider
from .credentials import CredentialProvider
from .sinks import CredentialSink, EnvironmentSink, InMemorySink, RoleCredentials
from .stop import StopProvider

__all__ = [
    "Provider",
    "StopProvider",
    "CredentialProvider",
    "CredentialSink",
    "EnvironmentSink",
    "InMemorySink",
    "RoleCredentials"
]
