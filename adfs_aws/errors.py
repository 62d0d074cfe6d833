"""Exceptions raised by the ADFS authentication core."""


class AdfsAwsError(Exception):
    """Base class for every error surfaced to callers of the core."""


class DiscoveryError(AdfsAwsError):
    """The IdP login form could not be located or the IdP is unreachable."""


class AuthenticationError(AdfsAwsError):
    """The IdP rejected the credentials; the message is scraped from its page."""


class ProtocolError(AdfsAwsError):
    """A response had neither the shape of a success nor of a known failure."""


class TransportError(AdfsAwsError):
    """Network or TLS failure talking to the IdP."""


class RoleAssumptionFailure(AdfsAwsError):
    """A single role could not be exchanged for credentials.

    Instances are returned as per-role results, never raised out of a batch.
    """

    def __init__(self, role_arn, cause):
        super().__init__(f"{role_arn}: {cause}")
        self.role_arn = role_arn
        self.cause = cause
