import configparser
import datetime
import os

from adfs_aws.credentials import write_aws_credentials
from adfs_aws.sts import TemporaryCredential

CREDENTIAL = TemporaryCredential(
    role_arn="arn:aws:iam::123456789012:role/RoleA",
    access_key_id="AKIAEXAMPLE",
    secret_access_key="secret",
    session_token="token",
    expiration=datetime.datetime(2026, 10, 19, 12, 0),
)


def read(path):
    config = configparser.ConfigParser()
    config.read(path)
    return config


def test_write_new_profile(tmp_path):
    creds_path = str(tmp_path / "aws" / "credentials")
    config_path = str(tmp_path / "aws" / "config")

    write_aws_credentials(CREDENTIAL, "adfs", "eu-west-1", creds_path, config_path)

    creds = read(creds_path)
    assert creds.get("adfs", "aws_access_key_id") == "AKIAEXAMPLE"
    assert creds.get("adfs", "aws_secret_access_key") == "secret"
    assert creds.get("adfs", "aws_session_token") == "token"
    assert creds.get("adfs", "region") == "eu-west-1"
    assert read(config_path).get("profile adfs", "output") == "json"
    assert os.stat(creds_path).st_mode & 0o777 == 0o600


def test_write_keeps_other_profiles(tmp_path):
    creds_path = tmp_path / "credentials"
    creds_path.write_text("[other]\naws_access_key_id = KEEP\n")
    config_path = str(tmp_path / "config")

    write_aws_credentials(CREDENTIAL, "default", "us-east-1", str(creds_path), config_path)

    creds = read(str(creds_path))
    assert creds.get("other", "aws_access_key_id") == "KEEP"
    assert creds.get("default", "aws_access_key_id") == "AKIAEXAMPLE"
    assert read(config_path).has_section("default")
