"""Exchange of SAML role pairs for temporary AWS credentials."""

import logging
from collections import namedtuple
from concurrent import futures

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from adfs_aws.errors import RoleAssumptionFailure
from adfs_aws.roles import account_id

log = logging.getLogger(__name__)

DEFAULT_REGION = "us-east-1"
DEFAULT_WORKERS = 8
MAX_SESSION_DURATION = 43200  # STS max is 12 h

TemporaryCredential = namedtuple(
    "TemporaryCredential",
    ["role_arn", "access_key_id", "secret_access_key", "session_token", "expiration"],
)
Account = namedtuple("Account", ["arn", "name", "credentials"])


def sts_client(region=DEFAULT_REGION):
    return boto3.client("sts", region_name=region)


def assume_role(client, role, saml_assertion, duration_seconds=None):
    """Call STS AssumeRoleWithSAML for one RoleCandidate.

    Returns a TemporaryCredential, or a RoleAssumptionFailure describing why
    the role could not be assumed.
    """
    params = {
        "RoleArn": role.role_arn,
        "PrincipalArn": role.principal_arn,
        "SAMLAssertion": saml_assertion,
    }
    if duration_seconds:
        params["DurationSeconds"] = min(duration_seconds, MAX_SESSION_DURATION)

    try:
        response = client.assume_role_with_saml(**params)
    except (ClientError, BotoCoreError) as exc:
        return RoleAssumptionFailure(role.role_arn, exc)

    credentials = response["Credentials"]
    return TemporaryCredential(
        role_arn=role.role_arn,
        access_key_id=credentials["AccessKeyId"],
        secret_access_key=credentials["SecretAccessKey"],
        session_token=credentials["SessionToken"],
        expiration=credentials["Expiration"],
    )


def _unique_roles(roles):
    """Drop repeated role ARNs, keeping the first occurrence."""
    seen = set()
    unique = []
    for role in roles:
        if role.role_arn in seen:
            continue
        seen.add(role.role_arn)
        unique.append(role)
    return unique


def assume_roles(client, roles, saml_assertion, duration_seconds=None, max_workers=DEFAULT_WORKERS):
    """Assume every role concurrently and return the credentials that were granted.

    Roles STS refuses are logged and left out; they never fail the batch.
    """
    roles = _unique_roles(roles)
    if not roles:
        return []

    with futures.ThreadPoolExecutor(max_workers=min(max_workers, len(roles))) as executor:
        results = list(executor.map(
            lambda role: assume_role(client, role, saml_assertion, duration_seconds),
            roles,
        ))

    granted = []
    for result in results:
        if isinstance(result, RoleAssumptionFailure):
            log.warning("Could not assume %s: %s", result.role_arn, result.cause)
            continue
        granted.append(result)
    return granted


def label_account(credential, account_mapping=None):
    """Build the Account shown to the user for *credential*."""
    acct_id = account_id(credential.role_arn)
    if acct_id is None:
        name = credential.role_arn
    else:
        name = (account_mapping or {}).get(acct_id) or acct_id
    return Account(arn=credential.role_arn, name=name, credentials=credential)


def assume_all(client, roles, saml_assertion, account_mapping=None, duration_seconds=None):
    """Assume every role and return the labeled Accounts that were granted."""
    granted = assume_roles(client, roles, saml_assertion, duration_seconds)
    return [label_account(credential, account_mapping) for credential in granted]
