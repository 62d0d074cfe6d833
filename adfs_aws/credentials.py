"""Persistence of temporary credentials into the AWS CLI's shared files."""

import configparser
import os

AWS_CREDENTIALS_PATH = os.path.expanduser("~/.aws/credentials")
AWS_CONFIG_PATH = os.path.expanduser("~/.aws/config")


def _read(path):
    config = configparser.ConfigParser()
    if os.path.exists(path):
        config.read(path)
    return config


def _write(config, path):
    with open(path, "w") as fh:
        config.write(fh)
    os.chmod(path, 0o600)


def write_aws_credentials(credential, profile, region,
                          credentials_path=AWS_CREDENTIALS_PATH, config_path=AWS_CONFIG_PATH):
    """Write a TemporaryCredential to *profile* in the AWS credentials file.

    Both files are rewritten with mode 0o600; other profiles are left as they were.
    """
    os.makedirs(os.path.dirname(credentials_path), exist_ok=True)

    creds_config = _read(credentials_path)
    if not creds_config.has_section(profile):
        creds_config.add_section(profile)

    creds_config.set(profile, "aws_access_key_id", credential.access_key_id)
    creds_config.set(profile, "aws_secret_access_key", credential.secret_access_key)
    creds_config.set(profile, "aws_session_token", credential.session_token)
    creds_config.set(profile, "region", region)
    _write(creds_config, credentials_path)

    # ~/.aws/config names non-default profiles "profile <name>"
    os.makedirs(os.path.dirname(config_path), exist_ok=True)
    aws_cfg = _read(config_path)
    cfg_section = "default" if profile == "default" else f"profile {profile}"
    if not aws_cfg.has_section(cfg_section):
        aws_cfg.add_section(cfg_section)
    aws_cfg.set(cfg_section, "region", region)
    aws_cfg.set(cfg_section, "output", "json")
    _write(aws_cfg, config_path)
