"""Backend menu service integration."""

from .client import MenuServiceClient
from .credentials import (
    ChainedCredentialProvider,
    CredentialProvider,
    EnvCredentialProvider,
    StaticCredentialProvider,
    TokenFileCredentialProvider,
    create_credential_provider,
)
from .models import RawMenu, RawMenuFile, RawMenuPage

__all__ = [
    "MenuServiceClient",
    "CredentialProvider",
    "StaticCredentialProvider",
    "EnvCredentialProvider",
    "TokenFileCredentialProvider",
    "ChainedCredentialProvider",
    "create_credential_provider",
    "RawMenu",
    "RawMenuFile",
    "RawMenuPage",
]
