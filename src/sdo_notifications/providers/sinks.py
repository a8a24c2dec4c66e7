"""Destinations for refreshed AWS credentials."""

import logging
import os
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

# Names read by boto3/botocore, not renamable
AWS_ACCESS_KEY_ID = "AWS_ACCESS_KEY_ID"
AWS_SECRET_ACCESS_KEY = "AWS_SECRET_ACCESS_KEY"
AWS_SESSION_TOKEN = "AWS_SESSION_TOKEN"
AWS_DEFAULT_REGION = "AWS_DEFAULT_REGION"


class RoleCredentials(BaseModel):
    """Credentials for one role mapped to the process."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    access_key_id: str = Field(alias="accessKeyId")
    secret_access_key: str = Field(alias="secretAccessKey")
    session_token: str = Field(alias="sessionToken")
    region: str
    expiration: datetime

    @field_validator("expiration")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def as_environment(self) -> Dict[str, str]:
        """Map the credentials onto the AWS SDK environment variables."""
        return {
            AWS_ACCESS_KEY_ID: self.access_key_id,
            AWS_SECRET_ACCESS_KEY: self.secret_access_key,
            AWS_SESSION_TOKEN: self.session_token,
            AWS_DEFAULT_REGION: self.region,
        }


class CredentialSink(ABC):
    """Receives every successfully fetched credential set."""

    @abstractmethod
    def write(self, credentials: RoleCredentials) -> None:
        pass


class EnvironmentSink(CredentialSink):
    """Writes credentials into the process environment.

    The four variables are written one after another. A reader on another
    thread may see a mix of old and new values.
    """

    def write(self, credentials: RoleCredentials) -> None:
        os.environ.update(credentials.as_environment())
        logger.info(
            f"Updated AWS credentials in environment for region {credentials.region}, "
            f"expires {credentials.expiration.isoformat()}"
        )


class InMemorySink(CredentialSink):
    """Keeps the last credential set instead of touching the environment."""

    def __init__(self):
        self.credentials: Optional[RoleCredentials] = None
        self.write_count = 0

    def write(self, credentials: RoleCredentials) -> None:
        self.credentials = credentials
        self.write_count += 1

    @property
    def environment(self) -> Dict[str, str]:
        if self.credentials is None:
            return {}
        return self.credentials.as_environment()
