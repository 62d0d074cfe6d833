"""The two operations callers of the core use: authenticate and get_credentials."""

import logging

from adfs_aws import sts
from adfs_aws.idp import DEFAULT_TIMEOUT, IdentityProviderSession
from adfs_aws.roles import parse_roles

log = logging.getLogger(__name__)


class Saml:
    """Browser-less ADFS login that hands back every AWS account it unlocks.

    *settings* needs ``directory_domain`` (e.g. https://sts.mycorp.com),
    ``domain`` (e.g. CORP) and optionally ``account_mapping``, ``region`` and
    ``duration``; a ``config.Settings`` fits.
    """

    def __init__(self, settings, sts_client=None, http=None, timeout=DEFAULT_TIMEOUT):
        self.settings = settings
        self.session = IdentityProviderSession(
            settings.directory_domain, settings.domain, timeout=timeout, http=http
        )
        self._sts_client = sts_client
        self.roles = []

    @property
    def sts_client(self):
        if self._sts_client is None:
            region = getattr(self.settings, "region", None) or sts.DEFAULT_REGION
            self._sts_client = sts.sts_client(region)
        return self._sts_client

    def authenticate(self, username, password):
        """Log in as *username* and return the Accounts whose roles could be assumed."""
        login_path = self.session.get_login_path()
        saml_assertion = self.session.login(login_path, username, password)

        self.roles = parse_roles(saml_assertion)
        if not self.roles:
            log.info("SAML assertion for %s carries no AWS roles", username)
            return []

        accounts = sts.assume_all(
            self.sts_client,
            self.roles,
            saml_assertion,
            account_mapping=getattr(self.settings, "account_mapping", None),
            duration_seconds=getattr(self.settings, "duration", None),
        )
        log.debug("Assumed %d of %d role(s)", len(accounts), len(self.roles))
        return accounts

    @staticmethod
    def get_credentials(account):
        """Return the TemporaryCredential obtained for *account*."""
        return account.credentials
