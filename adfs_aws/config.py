"""Configuration for adfs-aws.

Settings come from an INI file (``~/.adfs-aws`` by default)::

    [default]
    directory_domain = https://sts.mycorp.com
    domain = CORP
    username = alice
    profile = adfs
    region = us-east-1

    [accounts]
    123456789012 = prod

Command-line flags take precedence over the file.
"""

import configparser
import os
from collections import namedtuple

DEFAULT_CONFIG_PATH = os.path.expanduser("~/.adfs-aws")
DEFAULT_PROFILE = "adfs"
DEFAULT_REGION = "us-east-1"

SECTION = "default"
ACCOUNTS_SECTION = "accounts"

Settings = namedtuple(
    "Settings",
    ["directory_domain", "domain", "account_mapping", "username", "profile", "region", "duration"],
)


def load_config(config_path):
    """Load configuration from an INI file."""
    config = configparser.ConfigParser()
    if os.path.exists(config_path):
        config.read(config_path)
    return config


def account_mapping(config):
    """Return the ``{account id: display name}`` mapping from the accounts section."""
    if not config.has_section(ACCOUNTS_SECTION):
        return {}
    return dict(config.items(ACCOUNTS_SECTION))


def build_settings(config, overrides=None):
    """Merge *overrides* (flag values, None when unset) over *config*."""
    overrides = overrides or {}

    def cf(key, fallback=None):
        """Return the override if set, else the config value, else fallback."""
        if overrides.get(key) is not None:
            return overrides[key]
        if config.has_section(SECTION) and config.has_option(SECTION, key):
            return config.get(SECTION, key)
        return fallback

    duration = cf("duration")
    return Settings(
        directory_domain=cf("directory_domain"),
        domain=cf("domain"),
        account_mapping=account_mapping(config),
        username=cf("username"),
        profile=cf("profile", DEFAULT_PROFILE),
        region=cf("region", DEFAULT_REGION),
        duration=int(duration) if duration else None,
    )
