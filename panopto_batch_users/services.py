"""Collaborator interfaces consumed by the provisioning workflow."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Collection, Optional, Protocol

from panopto_batch_users.models import AccessRole, Credentials, NewUser


class ServiceError(Exception):
    """Any failure reported by a remote collaborator.

    ``str(exc)`` is the remote message, kept verbatim so it can be appended
    to diagnostics.
    """

    def __init__(self, message: str, *, fault_code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.fault_code = fault_code
        self.status_code = status_code


class FolderService(Protocol):
    def create_folder(self, auth: Credentials, name: str) -> uuid.UUID: ...


class UserDirectoryService(Protocol):
    def find_user_by_key(self, auth: Credentials, key: str) -> uuid.UUID: ...

    def create_user(self, auth: Credentials, user: NewUser) -> uuid.UUID: ...


class AccessControlService(Protocol):
    def grant_access(
        self,
        auth: Credentials,
        folder_id: uuid.UUID,
        user_ids: Collection[uuid.UUID],
        role: AccessRole,
    ) -> None: ...


@dataclass
class PanoptoServices:
    """The three collaborators one provisioning call talks to."""

    folders: FolderService
    users: UserDirectoryService
    access: AccessControlService


__all__ = [
    "AccessControlService",
    "FolderService",
    "PanoptoServices",
    "ServiceError",
    "UserDirectoryService",
]
