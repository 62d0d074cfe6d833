"""adfs-aws: authenticate to AWS through ADFS and store temporary credentials.

Logs in to the ADFS IdP-initiated sign-on page with a username and password,
assumes every AWS role the SAML assertion grants, lets the user choose one of
the resulting accounts and writes its credentials to ~/.aws/credentials.
"""

import argparse
import getpass
import logging
import sys

from adfs_aws.config import DEFAULT_CONFIG_PATH, DEFAULT_PROFILE, build_settings, load_config
from adfs_aws.core import Saml
from adfs_aws.credentials import AWS_CREDENTIALS_PATH, write_aws_credentials
from adfs_aws.errors import AdfsAwsError


def choose_account(accounts, preselect=None):
    """Return the account to log in to, prompting unless *preselect* picks one.

    *preselect* may be an account id, a display name or a role ARN.  Exits
    with an error when it matches nothing.
    """
    if preselect:
        candidates = [
            a for a in accounts
            if preselect in (a.arn, a.name) or f"::{preselect}:role/" in a.arn
        ]
        if not candidates:
            print(f"No account found matching {preselect}")
            print("Available accounts:")
            for account in accounts:
                print(f"  {account.arn} ({account.name})")
            sys.exit(1)
        if len(candidates) == 1:
            return candidates[0]
        accounts = candidates  # fall through to interactive selection

    if len(accounts) == 1:
        return accounts[0]

    print()
    for i, account in enumerate(accounts):
        print(f"[ {i} ] {account.arn} ({account.name})")

    while True:
        try:
            idx = int(input("\nChoose account to login: ").strip())
            if 0 <= idx < len(accounts):
                return accounts[idx]
        except ValueError:
            pass
        print("Invalid selection, please try again.")


def _build_parser():
    parser = argparse.ArgumentParser(
        description="Authenticate to AWS via ADFS SAML.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  adfs-aws                              Use values from ~/.adfs-aws
  adfs-aws --profile dev                Store credentials in 'dev' profile
  adfs-aws --account 123456789012       Pre-select an AWS account
""",
    )
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH,
                        help="Path to config file (default: ~/.adfs-aws)")
    parser.add_argument("--profile",
                        help=f"AWS credentials profile name (default: {DEFAULT_PROFILE})")
    parser.add_argument("--username", help="Directory username (overrides config)")
    parser.add_argument("--directory-domain",
                        help="ADFS server URL, e.g. https://sts.mycorp.com")
    parser.add_argument("--domain", help="Authentication domain, e.g. CORP")
    parser.add_argument("--region", help="AWS region written to ~/.aws/credentials (default: us-east-1)")
    parser.add_argument("--duration", type=int,
                        help="Session duration in seconds (default: STS default)")
    parser.add_argument("--account",
                        help="Pre-select AWS account ID, name or role ARN (skips prompt)")
    parser.add_argument("--debug", action="store_true",
                        help="Log requests and SAML processing details")
    return parser


def main(argv=None):
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    settings = build_settings(load_config(args.config), {
        "directory_domain": args.directory_domain,
        "domain": args.domain,
        "username": args.username,
        "profile": args.profile,
        "region": args.region,
        "duration": args.duration,
    })

    # Prompt for any missing required values
    directory_domain = settings.directory_domain
    if not directory_domain:
        directory_domain = input("ADFS URL (e.g. https://sts.mycorp.com): ").strip()
    if not directory_domain.startswith("http"):
        directory_domain = f"https://{directory_domain}"
    domain = settings.domain or input("Domain (e.g. CORP): ").strip()
    settings = settings._replace(directory_domain=directory_domain, domain=domain)

    default_username = settings.username or ""
    username = input(f"Username ({default_username}): ").strip() or default_username
    password = getpass.getpass("Password: ")

    saml = Saml(settings)
    try:
        accounts = saml.authenticate(username, password)
    except AdfsAwsError as exc:
        print(f"Failed with error: {str(exc).strip()}")
        sys.exit(1)

    if not accounts:
        print("No AWS roles could be assumed with this SAML assertion.")
        sys.exit(1)

    chosen = choose_account(accounts, args.account)
    credential = saml.get_credentials(chosen)
    write_aws_credentials(credential, settings.profile, settings.region)

    expiry = credential.expiration.strftime("%Y-%m-%d %H:%M:%S UTC")
    print(f"\nCredentials for {chosen.arn} ({chosen.name}) written to profile "
          f"'{settings.profile}' ({AWS_CREDENTIALS_PATH})")
    print(f"Expires: {expiry}")
    print("Done!")
    sys.exit(0)


if __name__ == "__main__":
    main()
