"""Unit tests for record parsing and result formatting."""

import pytest

from panopto_batch_users.models import (
    AccessRole,
    Credentials,
    Diagnostic,
    DiagnosticKind,
    InvalidRecordError,
    ProvisioningRecord,
    ProvisioningResult,
    leading_field,
)


class TestProvisioningRecord:
    def test_parse_well_formed_record(self) -> None:
        record = ProvisioningRecord.parse("jdoe,John,Doe,jdoe@example.com")

        assert record == ProvisioningRecord("jdoe", "John", "Doe", "jdoe@example.com")
        assert record.folder_name == "John Doe's Folder"

    def test_parse_is_repeatable(self) -> None:
        raw = "jdoe,John,Doe,jdoe@example.com"

        assert ProvisioningRecord.parse(raw) == ProvisioningRecord.parse(raw)

    def test_fields_are_stripped_and_extras_ignored(self) -> None:
        record = ProvisioningRecord.parse(" jdoe , John ,Doe, jdoe@example.com ,staff\r")

        assert record.user_key == "jdoe"
        assert record.first_name == "John"
        assert record.email == "jdoe@example.com"

    @pytest.mark.parametrize("raw", ["", "jdoe", "jdoe,John", "jdoe,John,Doe"])
    def test_too_few_fields(self, raw: str) -> None:
        with pytest.raises(InvalidRecordError, match="Invalid input data"):
            ProvisioningRecord.parse(raw)

    def test_folder_name_needs_a_name(self) -> None:
        assert ProvisioningRecord("jdoe", "", "", "jdoe@example.com").folder_name is None
        assert ProvisioningRecord("cher", "Cher", "", "cher@example.com").folder_name == "Cher 's Folder"

    def test_account_details(self) -> None:
        assert ProvisioningRecord("jdoe", "John", "Doe", "jdoe@example.com").has_account_details
        assert not ProvisioningRecord("jdoe", "John", "Doe", " ").has_account_details

    def test_leading_field(self) -> None:
        assert leading_field("jdoe,John") == "jdoe"
        assert leading_field("") == ""


class TestAccessRole:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("Creator", AccessRole.CREATOR),
            ("viewer", AccessRole.VIEWER),
            ("ViewerWithLink", AccessRole.VIEWER_WITH_LINK),
            ("viewer_with_link", AccessRole.VIEWER_WITH_LINK),
            (" publisher ", AccessRole.PUBLISHER),
        ],
    )
    def test_parse(self, value: str, expected: AccessRole) -> None:
        assert AccessRole.parse(value) is expected

    def test_parse_unknown(self) -> None:
        with pytest.raises(ValueError):
            AccessRole.parse("Owner")


class TestProvisioningResult:
    def test_success_has_no_text(self) -> None:
        result = ProvisioningResult(user_key="jdoe")

        assert result.ok
        assert result.error_text() is None

    def test_format_lists_every_diagnostic(self) -> None:
        result = ProvisioningResult(
            user_key="jdoe",
            diagnostics=(
                Diagnostic(DiagnosticKind.INPUT, "first"),
                Diagnostic(DiagnosticKind.SERVICE, "second"),
            ),
        )

        assert result.format() == "\nUser: jdoe\n\tfirst\n\tsecond\n=========="
        assert result.messages == ["first", "second"]


def test_credentials_repr_hides_password() -> None:
    assert "secret" not in repr(Credentials(user_key="admin", password="secret"))
