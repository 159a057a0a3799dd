from .airtable_client import AirtableTableClient, build_filter_formula
from .credentials import (
    CredentialProvider,
    GlobalConfigCredentialProvider,
    RemoteCredentials,
)

__all__ = [
    "AirtableTableClient",
    "build_filter_formula",
    "CredentialProvider",
    "GlobalConfigCredentialProvider",
    "RemoteCredentials",
]
