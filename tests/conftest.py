"""Shared fixtures for the provisioning tests."""

import pytest

from panopto_batch_users.models import Credentials
from panopto_batch_users.services import PanoptoServices

from tests.fakes import FakeAccessControl, FakeFolderService, FakeUserDirectory


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(user_key="admin", password="secret")


@pytest.fixture
def folders() -> FakeFolderService:
    return FakeFolderService()


@pytest.fixture
def users() -> FakeUserDirectory:
    return FakeUserDirectory()


@pytest.fixture
def access() -> FakeAccessControl:
    return FakeAccessControl()


@pytest.fixture
def services(folders, users, access) -> PanoptoServices:
    return PanoptoServices(folders=folders, users=users, access=access)
