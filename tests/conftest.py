import pytest

from adfs_aws.config import Settings
from tests import DIRECTORY_DOMAIN


@pytest.fixture
def settings():
    return Settings(
        directory_domain=DIRECTORY_DOMAIN,
        domain="CORP",
        account_mapping={},
        username="alice",
        profile="adfs",
        region="us-east-1",
        duration=None,
    )
