"""Value types shared by the provisioning workflow and the Panopto clients."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

EMPTY_ID = uuid.UUID(int=0)

RECORD_FIELD_COUNT = 4
DIAGNOSTIC_SEPARATOR = "\n=========="


class InvalidRecordError(ValueError):
    """Raised when a raw provisioning record cannot be parsed."""


class AccessRole(str, Enum):
    """Roles the Access Management service can grant on a folder."""

    CREATOR = "Creator"
    VIEWER = "Viewer"
    VIEWER_WITH_LINK = "ViewerWithLink"
    PUBLISHER = "Publisher"

    @classmethod
    def parse(cls, value: str) -> "AccessRole":
        token = (value or "").strip().lower()
        for role in cls:
            if token in {role.value.lower(), role.name.lower()}:
                return role
        raise ValueError(f"Unknown access role '{value}'")

    def __str__(self) -> str:
        return self.value


class SystemRole(str, Enum):
    NONE = "None"
    VIDEOGRAPHER = "Videographer"
    ADMIN = "Admin"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Credentials:
    user_key: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class ProvisioningRecord:
    user_key: str
    first_name: str
    last_name: str
    email: str

    @classmethod
    def parse(cls, raw: str) -> "ProvisioningRecord":
        """Build a record from ``userKey,firstName,lastName,email``.

        Fields are stripped of surrounding whitespace and anything past the
        fourth field is ignored. Raises :class:`InvalidRecordError` when fewer
        than four fields are present.
        """
        fields = [token.strip() for token in (raw or "").split(",")]
        if len(fields) < RECORD_FIELD_COUNT:
            raise InvalidRecordError(f"Invalid input data: {raw}")
        user_key, first_name, last_name, email = fields[:RECORD_FIELD_COUNT]
        return cls(user_key=user_key, first_name=first_name, last_name=last_name, email=email)

    @property
    def folder_name(self) -> Optional[str]:
        if not self.first_name and not self.last_name:
            return None
        return f"{self.first_name} {self.last_name}'s Folder"

    @property
    def has_account_details(self) -> bool:
        return all(value.strip() for value in (self.first_name, self.last_name, self.email))


def leading_field(raw: str) -> str:
    """Return the first comma-separated field, used to label invalid records."""

    return (raw or "").split(",", 1)[0].strip()


@dataclass(frozen=True)
class NewUser:
    """User record submitted to the directory when provisioning a new account."""

    user_key: str
    first_name: str
    last_name: str
    email: str
    system_role: SystemRole = SystemRole.NONE
    user_bio: str = ""
    email_session_notifications: bool = False

    @classmethod
    def from_record(cls, record: ProvisioningRecord) -> "NewUser":
        return cls(
            user_key=record.user_key,
            first_name=record.first_name,
            last_name=record.last_name,
            email=record.email,
        )


class DiagnosticKind(str, Enum):
    INPUT = "input"
    CONFLICT = "conflict"
    SERVICE = "service"


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    message: str


@dataclass(frozen=True)
class ProvisioningResult:
    """Outcome of one provisioning call.

    ``diagnostics`` is ordered and holds at most one entry per step; an empty
    tuple means every step succeeded.
    """

    user_key: str
    diagnostics: Tuple[Diagnostic, ...] = ()
    folder_id: uuid.UUID = EMPTY_ID
    user_id: uuid.UUID = EMPTY_ID

    @property
    def ok(self) -> bool:
        return not self.diagnostics

    @property
    def messages(self) -> List[str]:
        return [entry.message for entry in self.diagnostics]

    def format(self) -> str:
        lines = [f"\nUser: {self.user_key}"]
        lines.extend(f"\n\t{entry.message}" for entry in self.diagnostics)
        lines.append(DIAGNOSTIC_SEPARATOR)
        return "".join(lines)

    def error_text(self) -> Optional[str]:
        return None if self.ok else self.format()


__all__ = [
    "EMPTY_ID",
    "AccessRole",
    "Credentials",
    "Diagnostic",
    "DiagnosticKind",
    "InvalidRecordError",
    "NewUser",
    "ProvisioningRecord",
    "ProvisioningResult",
    "SystemRole",
    "leading_field",
]
