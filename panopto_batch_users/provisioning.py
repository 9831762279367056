"""Create a user, their folder, and grant them Creator access on it.

One call walks ParseInput -> CreateFolder -> CreateUser -> GrantAccess and
stops at the first failing step. Every step returns a ``_StepOutcome``
holding either the identifier it produced or a single diagnostic; nothing is
shared between calls, so the workflow can be invoked once per record in a
batch (or concurrently) without one record's errors leaking into another.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Optional

from panopto_batch_users.config import ConfigError, load_app_config
from panopto_batch_users.models import (
    EMPTY_ID,
    AccessRole,
    Credentials,
    Diagnostic,
    DiagnosticKind,
    InvalidRecordError,
    NewUser,
    ProvisioningRecord,
    ProvisioningResult,
    leading_field,
)
from panopto_batch_users.panopto_soap import build_panopto_services
from panopto_batch_users.services import (
    AccessControlService,
    FolderService,
    PanoptoServices,
    UserDirectoryService,
)


@dataclass(frozen=True)
class _StepOutcome:
    value: uuid.UUID = EMPTY_ID
    diagnostic: Optional[Diagnostic] = None

    @property
    def succeeded(self) -> bool:
        return self.diagnostic is None and self.value != EMPTY_ID


def _failure(kind: DiagnosticKind, message: str) -> _StepOutcome:
    return _StepOutcome(diagnostic=Diagnostic(kind, message))


def _create_folder(folders: FolderService, auth: Credentials, folder_name: str) -> _StepOutcome:
    try:
        folder_id = folders.create_folder(auth, folder_name)
    except Exception as exc:
        return _failure(
            DiagnosticKind.SERVICE,
            f"Unable to create a folder with folder name: {folder_name}; {exc}",
        )
    if folder_id == EMPTY_ID:
        return _failure(
            DiagnosticKind.SERVICE,
            f"Unable to create a folder with folder name: {folder_name}; service returned an empty folder id",
        )
    return _StepOutcome(value=folder_id)


def _create_user(users: UserDirectoryService, auth: Credentials, record: ProvisioningRecord) -> _StepOutcome:
    if not record.user_key.strip():
        return _failure(DiagnosticKind.INPUT, "Invalid user name")
    try:
        existing_id = users.find_user_by_key(auth, record.user_key)
        if existing_id != EMPTY_ID:
            return _failure(DiagnosticKind.CONFLICT, f"The user {existing_id} already exists")
        if not record.has_account_details:
            return _failure(
                DiagnosticKind.INPUT,
                f"{record.user_key} doesn't have enough details to make a user account",
            )
        user_id = users.create_user(auth, NewUser.from_record(record))
    except Exception as exc:
        return _failure(DiagnosticKind.SERVICE, f"Error creating user: {exc}")
    if user_id == EMPTY_ID:
        return _failure(DiagnosticKind.SERVICE, "Error creating user: service returned an empty user id")
    return _StepOutcome(value=user_id)


def _grant_access(
    access: AccessControlService,
    auth: Credentials,
    folder_id: uuid.UUID,
    user_id: uuid.UUID,
    role: AccessRole,
) -> Optional[Diagnostic]:
    try:
        access.grant_access(auth, folder_id, {user_id}, role)
    except Exception as exc:
        return Diagnostic(
            DiagnosticKind.SERVICE,
            f"Unable to adding user {user_id} as {role.value} of folder {folder_id}; {exc}",
        )
    return None


def run_provisioning(
    credentials: Credentials,
    raw_record: str,
    services: PanoptoServices,
    *,
    role: AccessRole = AccessRole.CREATOR,
) -> ProvisioningResult:
    """Provision one record and return the structured outcome."""

    try:
        record = ProvisioningRecord.parse(raw_record)
    except InvalidRecordError as exc:
        return ProvisioningResult(
            user_key=leading_field(raw_record),
            diagnostics=(Diagnostic(DiagnosticKind.INPUT, str(exc)),),
        )

    folder_name = record.folder_name
    if folder_name is None:
        return ProvisioningResult(
            user_key=record.user_key,
            diagnostics=(
                Diagnostic(DiagnosticKind.INPUT, f"Unable to derive a folder name for user {record.user_key}"),
            ),
        )

    folder = _create_folder(services.folders, credentials, folder_name)
    if not folder.succeeded:
        return ProvisioningResult(user_key=record.user_key, diagnostics=(folder.diagnostic,))

    user = _create_user(services.users, credentials, record)
    if not user.succeeded:
        return ProvisioningResult(
            user_key=record.user_key,
            diagnostics=(user.diagnostic,),
            folder_id=folder.value,
        )

    grant_error = _grant_access(services.access, credentials, folder.value, user.value, AccessRole(role))
    return ProvisioningResult(
        user_key=record.user_key,
        diagnostics=(grant_error,) if grant_error else (),
        folder_id=folder.value,
        user_id=user.value,
    )


def _default_services() -> PanoptoServices:
    return build_panopto_services(load_app_config())


def provision_user(
    admin_user_key: str,
    admin_password: str,
    raw_record: str,
    services: Optional[PanoptoServices] = None,
    *,
    role: AccessRole = AccessRole.CREATOR,
) -> Optional[str]:
    """Create a new user and their folder, then make them Creator of it.

    Args:
        admin_user_key: User with admin access to create the new user
        admin_password: Admin user's password
        raw_record: ``userKey,firstName,lastName,email``
        services: Collaborators to call; the Panopto SOAP clients built from
            the environment when omitted

    Returns:
        Diagnostic text for a failed record, ``None`` when every step succeeded.
    """
    credentials = Credentials(user_key=admin_user_key, password=admin_password)
    if services is None:
        try:
            services = _default_services()
        except ConfigError as exc:
            result = ProvisioningResult(
                user_key=leading_field(raw_record),
                diagnostics=(Diagnostic(DiagnosticKind.SERVICE, f"Unable to reach the Panopto API: {exc}"),),
            )
            return result.error_text()
    return run_provisioning(credentials, raw_record, services, role=role).error_text()


__all__ = ["provision_user", "run_provisioning"]
