"""SOAP clients for the Panopto PublicAPI services used during provisioning.

Each Panopto service (SessionManagement, UserManagement, AccessManagement)
lives at its own ``.svc`` endpoint and speaks SOAP 1.1. The clients below
build the request envelopes by hand and post them with ``requests``.

Usage:
    from panopto_batch_users.panopto_soap import SessionManagementClient

    folders = SessionManagementClient("https://demo.hosted.panopto.com")
    folder_id = folders.create_folder(credentials, "Jane Doe's Folder")
"""

from __future__ import annotations

import uuid
import xml.etree.ElementTree as ET
from typing import Collection, Iterable, Optional

import requests

from panopto_batch_users.config import DEFAULT_API_VERSION, DEFAULT_TIMEOUT_SECONDS, AppConfig
from panopto_batch_users.models import EMPTY_ID, AccessRole, Credentials, NewUser
from panopto_batch_users.services import PanoptoServices, ServiceError

SOAP_ENV_NS = "http://schemas.xmlsoap.org/soap/envelope/"
TEMPURI_NS = "http://tempuri.org/"
DATA_CONTRACT_NS = "http://schemas.datacontract.org/2004/07/Panopto.Server.Services.PublicAPI.V40"
ARRAYS_NS = "http://schemas.microsoft.com/2003/10/Serialization/Arrays"
XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"

ET.register_namespace("s", SOAP_ENV_NS)
ET.register_namespace("a", DATA_CONTRACT_NS)
ET.register_namespace("b", ARRAYS_NS)
ET.register_namespace("i", XSI_NS)


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _find_descendant(element: ET.Element, name: str) -> Optional[ET.Element]:
    for candidate in element.iter():
        if _local_name(candidate.tag) == name:
            return candidate
    return None


def _is_nil(element: ET.Element) -> bool:
    return (element.get(f"{{{XSI_NS}}}nil") or "").lower() == "true"


def _parse_guid(raw: Optional[str], *, what: str) -> uuid.UUID:
    text = (raw or "").strip()
    if not text:
        return EMPTY_ID
    try:
        return uuid.UUID(text)
    except ValueError as exc:
        raise ServiceError(f"Invalid {what} returned by Panopto: '{text}'") from exc


def _bool_text(value: bool) -> str:
    return "true" if value else "false"


class PanoptoSoapClient:
    """Base client that posts SOAP envelopes to one Panopto PublicAPI service."""

    service_name = ""

    def __init__(
        self,
        base_url: str,
        *,
        api_version: str = DEFAULT_API_VERSION,
        timeout: int = DEFAULT_TIMEOUT_SECONDS,
        verify_ssl: bool = True,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Panopto site root (e.g. "https://demo.hosted.panopto.com")
            api_version: PublicAPI version segment of the endpoint path
            timeout: Request timeout in seconds
            verify_ssl: Verify the server certificate
            session: Optional shared ``requests.Session``
        """
        self.base_url = base_url.rstrip("/")
        self.api_version = api_version
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.session = session or requests.Session()

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/Panopto/PublicAPI/{self.api_version}/{self.service_name}.svc"

    def soap_action(self, operation: str) -> str:
        return f'"{TEMPURI_NS}I{self.service_name}/{operation}"'

    # =========================================================================
    # Envelope helpers
    # =========================================================================

    @staticmethod
    def _child(parent: ET.Element, name: str, text: Optional[str] = None, *, ns: str = TEMPURI_NS) -> ET.Element:
        element = ET.SubElement(parent, f"{{{ns}}}{name}")
        if text is None:
            element.set(f"{{{XSI_NS}}}nil", "true")
        else:
            element.text = text
        return element

    def _append_auth(self, operation: ET.Element, auth: Credentials) -> None:
        auth_element = ET.SubElement(operation, f"{{{TEMPURI_NS}}}auth")
        # Data contract members are serialized in alphabetical order.
        self._child(auth_element, "AuthCode", None, ns=DATA_CONTRACT_NS)
        self._child(auth_element, "Password", auth.password, ns=DATA_CONTRACT_NS)
        self._child(auth_element, "UserKey", auth.user_key, ns=DATA_CONTRACT_NS)

    def _build_envelope(self, operation: str, auth: Credentials) -> tuple[ET.Element, ET.Element]:
        envelope = ET.Element(f"{{{SOAP_ENV_NS}}}Envelope")
        body = ET.SubElement(envelope, f"{{{SOAP_ENV_NS}}}Body")
        request = ET.SubElement(body, f"{{{TEMPURI_NS}}}{operation}")
        self._append_auth(request, auth)
        return envelope, request

    # =========================================================================
    # Transport
    # =========================================================================

    def _make_request(self, operation: str, envelope: ET.Element) -> ET.Element:
        """Post an envelope and return the ``<operation>Response`` element.

        Raises:
            ServiceError: On transport failures, SOAP faults, HTTP errors and
                malformed responses.
        """
        payload = ET.tostring(envelope, encoding="utf-8", xml_declaration=True)
        headers = {
            "Content-Type": "text/xml; charset=utf-8",
            "SOAPAction": self.soap_action(operation),
        }
        try:
            response = self.session.post(
                self.endpoint,
                data=payload,
                headers=headers,
                timeout=self.timeout,
                verify=self.verify_ssl,
            )
        except requests.exceptions.RequestException as exc:
            raise ServiceError(f"Request failed: {exc}") from exc

        root = self._parse_document(response)
        if root is not None:
            fault = _find_descendant(root, "Fault")
            if fault is not None:
                fault_string = _find_descendant(fault, "faultstring")
                fault_code = _find_descendant(fault, "faultcode")
                message = (fault_string.text or "").strip() if fault_string is not None else ""
                raise ServiceError(
                    message or f"{operation} failed with a SOAP fault",
                    fault_code=(fault_code.text or "").strip() if fault_code is not None else None,
                    status_code=response.status_code,
                )

        if not response.ok:
            reason = response.reason or "error"
            raise ServiceError(f"HTTP {response.status_code} {reason} from {self.endpoint}", status_code=response.status_code)
        if root is None:
            raise ServiceError(f"Invalid XML response from {self.service_name}.{operation}")

        result = _find_descendant(root, f"{operation}Response")
        if result is None:
            raise ServiceError(f"Missing {operation}Response in {self.service_name} reply")
        return result

    @staticmethod
    def _parse_document(response: requests.Response) -> Optional[ET.Element]:
        content = response.content or b""
        if not content.strip():
            return None
        try:
            return ET.fromstring(content)
        except ET.ParseError:
            return None


class SessionManagementClient(PanoptoSoapClient):
    """Folder operations from ``ISessionManagement``."""

    service_name = "SessionManagement"

    def create_folder(self, auth: Credentials, name: str, *, parent_folder: Optional[uuid.UUID] = None, is_public: bool = False) -> uuid.UUID:
        envelope, request = self._build_envelope("AddFolder", auth)
        self._child(request, "name", name)
        self._child(request, "parentFolder", str(parent_folder) if parent_folder else None)
        self._child(request, "isPublic", _bool_text(is_public))
        response = self._make_request("AddFolder", envelope)
        result = _find_descendant(response, "AddFolderResult")
        if result is None or _is_nil(result):
            raise ServiceError("AddFolder returned no folder")
        folder_id = _find_descendant(result, "Id")
        return _parse_guid(folder_id.text if folder_id is not None else None, what="folder id")


class UserManagementClient(PanoptoSoapClient):
    """User lookup and creation from ``IUserManagement``."""

    service_name = "UserManagement"

    def find_user_by_key(self, auth: Credentials, key: str) -> uuid.UUID:
        """Return the user's id, or ``EMPTY_ID`` when no such user exists."""
        envelope, request = self._build_envelope("GetUserByKey", auth)
        self._child(request, "userKey", key)
        response = self._make_request("GetUserByKey", envelope)
        result = _find_descendant(response, "GetUserByKeyResult")
        if result is None or _is_nil(result):
            return EMPTY_ID
        user_id = _find_descendant(result, "UserId")
        return _parse_guid(user_id.text if user_id is not None else None, what="user id")

    def create_user(self, auth: Credentials, user: NewUser, *, initial_password: str = "") -> uuid.UUID:
        envelope, request = self._build_envelope("CreateUser", auth)
        user_element = ET.SubElement(request, f"{{{TEMPURI_NS}}}user")
        self._child(user_element, "Email", user.email, ns=DATA_CONTRACT_NS)
        self._child(user_element, "EmailSessionNotifications", _bool_text(user.email_session_notifications), ns=DATA_CONTRACT_NS)
        self._child(user_element, "FirstName", user.first_name, ns=DATA_CONTRACT_NS)
        self._child(user_element, "LastName", user.last_name, ns=DATA_CONTRACT_NS)
        self._child(user_element, "SystemRole", user.system_role.value, ns=DATA_CONTRACT_NS)
        self._child(user_element, "UserBio", user.user_bio, ns=DATA_CONTRACT_NS)
        self._child(user_element, "UserId", str(EMPTY_ID), ns=DATA_CONTRACT_NS)
        self._child(user_element, "UserKey", user.user_key, ns=DATA_CONTRACT_NS)
        self._child(request, "initialPassword", initial_password)
        response = self._make_request("CreateUser", envelope)
        result = _find_descendant(response, "CreateUserResult")
        return _parse_guid(result.text if result is not None else None, what="user id")


class AccessManagementClient(PanoptoSoapClient):
    """Folder access grants from ``IAccessManagement``."""

    service_name = "AccessManagement"

    def grant_access(
        self,
        auth: Credentials,
        folder_id: uuid.UUID,
        user_ids: Collection[uuid.UUID],
        role: AccessRole,
    ) -> None:
        envelope, request = self._build_envelope("GrantUsersAccessToFolder", auth)
        self._child(request, "folderId", str(folder_id))
        ids_element = ET.SubElement(request, f"{{{TEMPURI_NS}}}userIds")
        for user_id in _sorted_ids(user_ids):
            self._child(ids_element, "guid", str(user_id), ns=ARRAYS_NS)
        self._child(request, "role", AccessRole(role).value)
        self._make_request("GrantUsersAccessToFolder", envelope)


def _sorted_ids(user_ids: Iterable[uuid.UUID]) -> list[uuid.UUID]:
    return sorted(set(user_ids), key=str)


def build_panopto_services(app_config: AppConfig, *, session: Optional[requests.Session] = None) -> PanoptoServices:
    """Wire the three SOAP clients from the loaded configuration."""

    shared_session = session or requests.Session()
    options = {
        "api_version": app_config.api.api_version,
        "timeout": app_config.api.timeout,
        "verify_ssl": app_config.api.verify_ssl,
        "session": shared_session,
    }
    base_url = app_config.base_url
    return PanoptoServices(
        folders=SessionManagementClient(base_url, **options),
        users=UserManagementClient(base_url, **options),
        access=AccessManagementClient(base_url, **options),
    )


__all__ = [
    "AccessManagementClient",
    "PanoptoSoapClient",
    "SessionManagementClient",
    "UserManagementClient",
    "build_panopto_services",
]
