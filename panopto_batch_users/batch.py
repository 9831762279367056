"""Run the provisioning workflow over a list of records."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, List

from panopto_batch_users.models import AccessRole, Credentials, ProvisioningResult
from panopto_batch_users.provisioning import run_provisioning
from panopto_batch_users.services import PanoptoServices

COMMENT_PREFIX = "#"


def _is_comment(line: str) -> bool:
    # "#jdoe,..." is a record whose user key starts with "#"; only "#" alone or "# ..." is a comment.
    return line == COMMENT_PREFIX or (line.startswith(COMMENT_PREFIX) and line[1].isspace())


def iter_records(lines: Iterable[str]) -> Iterator[str]:
    for line in lines:
        record = line.strip()
        if not record or _is_comment(record):
            continue
        yield record


def read_records(path: str) -> List[str]:
    with open(path, "r", encoding="utf-8-sig") as handle:
        return list(iter_records(handle))


@dataclass
class BatchReport:
    results: List[ProvisioningResult] = field(default_factory=list)

    @property
    def succeeded(self) -> List[ProvisioningResult]:
        return [result for result in self.results if result.ok]

    @property
    def failed(self) -> List[ProvisioningResult]:
        return [result for result in self.results if not result.ok]

    @property
    def ok(self) -> bool:
        return not self.failed

    def error_text(self) -> str:
        return "".join(result.format() for result in self.failed)

    def write_error_log(self, path: str) -> None:
        with open(path, "w", encoding="utf-8") as handle:
            handle.write(self.error_text().lstrip("\n"))
            handle.write("\n")


class BatchProvisioner:
    """Provisions records one at a time, each with its own diagnostics."""

    def __init__(
        self,
        credentials: Credentials,
        services: PanoptoServices,
        *,
        role: AccessRole = AccessRole.CREATOR,
    ) -> None:
        self.credentials = credentials
        self.services = services
        self.role = role

    def provision(self, raw_record: str) -> ProvisioningResult:
        result = run_provisioning(self.credentials, raw_record, self.services, role=self.role)
        if result.ok:
            print(f"✅ Provisioned '{result.user_key}' (folder {result.folder_id})")
        else:
            print(f"[ERROR] Failed to provision '{result.user_key}': {'; '.join(result.messages)}")
        return result

    def run(self, lines: Iterable[str]) -> BatchReport:
        report = BatchReport()
        for raw_record in iter_records(lines):
            report.results.append(self.provision(raw_record))
        total = len(report.results)
        print(f"[INFO] Processed {total} record(s): {len(report.succeeded)} succeeded, {len(report.failed)} failed")
        return report


__all__ = ["BatchProvisioner", "BatchReport", "iter_records", "read_records"]
