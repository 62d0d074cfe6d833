"""Extraction of AWS role pairs from a SAML assertion."""

import base64
import logging
import re
from collections import namedtuple

from adfs_aws.errors import ProtocolError
from adfs_aws.scanner import XML, TagHandler, scan

log = logging.getLogger(__name__)

ROLE_PREFIX = "arn:aws:iam::"

_ACCOUNT_ID = re.compile(r"(\d+):role")

RoleCandidate = namedtuple("RoleCandidate", ["principal_arn", "role_arn"])


def decode_assertion(saml_assertion):
    """Decode a base64 SAML assertion into its XML text."""
    try:
        return base64.b64decode(saml_assertion).decode("utf-8")
    except ValueError as exc:
        raise ProtocolError(f"SAML assertion is not valid base64 UTF-8: {exc}") from exc


class _RoleHandler(TagHandler):
    def __init__(self):
        self.roles = []
        self.error = None

    def on_text(self, text):
        text = text.strip()
        if not text.startswith(ROLE_PREFIX):
            return

        role = _parse_role_value(text)
        if role is None:
            log.debug("Skipping role attribute without a principal: %s", text)
            return
        self.roles.append(role)

    def on_error(self, cause):
        self.error = cause


def _parse_role_value(text):
    """Split ``principal,role`` into a RoleCandidate.

    Some IdPs emit the pair the other way round; it is put back in order.
    Returns None when there is no comma.
    """
    first, sep, second = text.partition(",")
    if not sep:
        return None

    first, second = first.strip(), second.strip()
    if ":role/" in first and ":saml-provider/" in second:
        first, second = second, first
    return RoleCandidate(principal_arn=first, role_arn=second)


def parse_roles(saml_assertion):
    """Return the RoleCandidates carried by *saml_assertion*, in document order.

    An assertion without any role attribute yields an empty list.
    """
    xml = decode_assertion(saml_assertion)
    handler = scan(xml.encode("utf-8"), _RoleHandler(), features=XML)
    if handler.error is not None:
        raise ProtocolError(f"Could not parse SAML assertion: {handler.error}") from handler.error

    log.debug("Found %d role(s) in SAML assertion", len(handler.roles))
    return handler.roles


def account_id(role_arn):
    """Return the account id in *role_arn*, or None if it has none."""
    match = _ACCOUNT_ID.search(role_arn)
    return match.group(1) if match else None
