"""Browser-less ADFS SAML login that exchanges the assertion for AWS credentials."""

from adfs_aws.core import Saml
from adfs_aws.errors import (
    AdfsAwsError,
    AuthenticationError,
    DiscoveryError,
    ProtocolError,
    RoleAssumptionFailure,
    TransportError,
)

__version__ = "1.0.0"

__all__ = [
    "Saml",
    "AdfsAwsError",
    "AuthenticationError",
    "DiscoveryError",
    "ProtocolError",
    "RoleAssumptionFailure",
    "TransportError",
]
