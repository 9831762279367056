"""Panopto batch user provisioning entrypoint."""

import argparse
import getpass
import sys
from typing import List, Optional

from panopto_batch_users.batch import BatchProvisioner, read_records
from panopto_batch_users.config import ConfigError, load_app_config
from panopto_batch_users.models import AccessRole, Credentials
from panopto_batch_users.panopto_soap import build_panopto_services

EXIT_OK = 0
EXIT_FAILED_RECORDS = 1
EXIT_CONFIG_ERROR = 2


def parse_cli_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Create Panopto users, give each a personal folder, and make them Creator of it."
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--input",
        metavar="FILE",
        help="Text/CSV file with one 'userKey,firstName,lastName,email' record per line.",
    )
    source.add_argument(
        "--record",
        action="append",
        metavar="TEXT",
        help="A single 'userKey,firstName,lastName,email' record (repeatable).",
    )
    parser.add_argument(
        "--user-key",
        dest="user_key",
        help="Admin user key (defaults to PANOPTO_USERNAME).",
    )
    parser.add_argument(
        "--role",
        help="Access role granted on each new folder (Creator, Viewer, ViewerWithLink, Publisher).",
    )
    parser.add_argument(
        "--error-log",
        dest="error_log",
        metavar="FILE",
        help="Write the diagnostics of failed records to this file.",
    )
    parser.add_argument(
        "--config",
        metavar="FILE",
        help="JSON config file (defaults to PANOPTO_CONFIG_PATH or panopto_config.json).",
    )
    return parser.parse_args(argv)


def _resolve_credentials(args: argparse.Namespace, username: Optional[str], password: Optional[str]) -> Credentials:
    user_key = (args.user_key or username or "").strip()
    if not user_key:
        raise ConfigError("Admin user key required: pass --user-key or set PANOPTO_USERNAME")
    if not password:
        password = getpass.getpass(f"Password for {user_key}: ")
    return Credentials(user_key=user_key, password=password)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_cli_args(argv)

    try:
        app_config = load_app_config(args.config)
        role = AccessRole.parse(args.role) if args.role else app_config.provisioning.access_role
        credentials = _resolve_credentials(args, app_config.server.username, app_config.server.password)
    except (ConfigError, ValueError) as exc:
        print(f"❌ {exc}")
        return EXIT_CONFIG_ERROR

    if args.input:
        try:
            records = read_records(args.input)
        except OSError as exc:
            print(f"❌ Unable to read '{args.input}': {exc}")
            return EXIT_CONFIG_ERROR
    else:
        records = list(args.record)

    if not records:
        print("ℹ️ No records to provision; nothing to do.")
        return EXIT_OK

    print(f"[INFO] Provisioning {len(records)} record(s) on {app_config.base_url} as {role.value}")
    provisioner = BatchProvisioner(credentials, build_panopto_services(app_config), role=role)
    report = provisioner.run(records)

    if report.ok:
        return EXIT_OK

    print(report.error_text())
    if args.error_log:
        try:
            report.write_error_log(args.error_log)
            print(f"📝 Wrote diagnostics for {len(report.failed)} record(s) to '{args.error_log}'")
        except OSError as exc:
            print(f"⚠️ Unable to write error log '{args.error_log}': {exc}")
    return EXIT_FAILED_RECORDS


if __name__ == "__main__":
    sys.exit(main())
