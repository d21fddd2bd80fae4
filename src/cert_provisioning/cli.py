"""Command-line entry point for local certificate provisioning.

Usage::

    localhost-certs all
    localhost-certs init-ca --output-dir certs
    localhost-certs issue --san-dns localhost --san-dns myapp.test --san-ip 127.0.0.1
    localhost-certs openssl-config
    localhost-certs export-root --der rootCA.cer
    localhost-certs info
    localhost-certs verify --hostname localhost
    python -m cert_provisioning all
"""

import argparse
import getpass
import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from tls_utils import CertificateVerificationError
from .ca_manager import CAManager
from .cert_issuer import CertificateIssuer
from .models import ProvisioningConfig, ProvisioningResult
from .openssl_config import write_openssl_config

logger = logging.getLogger(__name__)

PASSPHRASE_ENV = "LOCALHOST_CA_PASSPHRASE"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="localhost-certs",
        description="Create a local root CA and a localhost server certificate signed by it.",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        default=".",
        metavar="DIR",
        help="Directory for generated keys and certificates (default: current directory).",
    )
    parser.add_argument(
        "--passphrase",
        default=None,
        help=f"Root CA key passphrase (default: ${PASSPHRASE_ENV} or interactive prompt).",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Enable debug output (full tracebacks, verbose logging).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    init_ca = subparsers.add_parser("init-ca", help="Create the root CA key and certificate")
    init_ca.add_argument("--ca-cn", default=None, help="Root CA common name")
    init_ca.add_argument("--ca-days", type=int, default=None, help="Root CA validity in days")
    init_ca.add_argument("--ca-key-size", type=int, default=None, help="Root CA key size in bits")
    init_ca.add_argument("--force", action="store_true", default=False, help="Replace an existing root CA")

    issue = subparsers.add_parser("issue", help="Issue the server key, CSR and certificate")
    everything = subparsers.add_parser("all", help="Create the root CA (if missing) and issue the server certificate")
    everything.add_argument("--ca-cn", default=None, help="Root CA common name")
    everything.add_argument("--ca-days", type=int, default=None, help="Root CA validity in days")
    everything.add_argument("--ca-key-size", type=int, default=None, help="Root CA key size in bits")
    everything.add_argument("--force", action="store_true", default=False, help="Replace an existing root CA")

    openssl_cfg = subparsers.add_parser("openssl-config", help="Write an equivalent OpenSSL request config")

    for p in (issue, everything, openssl_cfg):
        p.add_argument("--cn", default=None, help="Server certificate common name (default: localhost)")
        p.add_argument(
            "--san-dns",
            action="append",
            default=None,
            metavar="NAME",
            help="DNS name for the SAN extension (repeatable, default: localhost)",
        )
        p.add_argument(
            "--san-ip",
            action="append",
            default=None,
            metavar="ADDR",
            help="IP address for the SAN extension (repeatable)",
        )
        p.add_argument("--key-size", type=int, default=None, help="Server key size in bits")
        p.add_argument("--days", type=int, default=None, help="Server certificate validity in days")

    export_root = subparsers.add_parser("export-root", help="Copy the root CA certificate for a trust store")
    export_root.add_argument("dest", help="Destination file")
    export_root.add_argument("--der", action="store_true", default=False, help="Write DER instead of PEM")

    subparsers.add_parser("info", help="Show root CA and server certificate details")

    verify = subparsers.add_parser("verify", help="Verify the server certificate against the root CA")
    verify.add_argument("--hostname", default="localhost", help="Host name the certificate must cover")

    return parser


def build_config(args: argparse.Namespace) -> ProvisioningConfig:
    """Apply command-line overrides on top of the default configuration."""
    config = ProvisioningConfig(output_dir=Path(args.output_dir))

    root_ca = config.root_ca.model_dump()
    if getattr(args, "ca_cn", None) is not None:
        root_ca["subject"]["common_name"] = args.ca_cn
    if getattr(args, "ca_days", None) is not None:
        root_ca["validity_days"] = args.ca_days
    if getattr(args, "ca_key_size", None) is not None:
        root_ca["key_size"] = args.ca_key_size

    server = config.server.model_dump()
    if getattr(args, "cn", None) is not None:
        server["subject"]["common_name"] = args.cn
    if getattr(args, "san_dns", None) is not None:
        server["san_dns_names"] = args.san_dns
    if getattr(args, "san_ip", None) is not None:
        server["san_ip_addresses"] = args.san_ip
    if getattr(args, "key_size", None) is not None:
        server["key_size"] = args.key_size
    if getattr(args, "days", None) is not None:
        server["validity_days"] = args.days

    return ProvisioningConfig(
        output_dir=config.output_dir,
        root_ca=root_ca,
        server=server,
    )


def _resolve_passphrase(args: argparse.Namespace, confirm: bool = False) -> bytes:
    passphrase = args.passphrase or os.environ.get(PASSPHRASE_ENV)
    if passphrase is None:
        passphrase = getpass.getpass("Root CA passphrase: ")
        if confirm and getpass.getpass("Confirm passphrase: ") != passphrase:
            raise ValueError("Passphrases do not match")
    return passphrase.encode()


def _print_result(result: ProvisioningResult) -> None:
    print(f"Server key:         {result.server_key_path}")
    print(f"Server certificate: {result.server_cert_path}")
    print(f"Valid for:          {', '.join(result.san_names)}")


def _run(args: argparse.Namespace, config: ProvisioningConfig) -> None:
    ca_manager = CAManager(config)
    issuer = CertificateIssuer(ca_manager)
    command = args.command

    if command in ("init-ca", "all"):
        creating = args.force or not ca_manager.root_ca_exists()
        passphrase = _resolve_passphrase(args, confirm=creating)
        ca_manager.initialize_root_ca(passphrase, force=args.force)
        print(f"Root CA certificate: {config.root_cert_path}")
        print("Import it into your browser or OS trust store to trust the server certificate.")

        if command == "all":
            _print_result(issuer.issue_server_certificate(passphrase))

    elif command == "issue":
        _print_result(issuer.issue_server_certificate(_resolve_passphrase(args)))

    elif command == "openssl-config":
        print(write_openssl_config(config))

    elif command == "export-root":
        print(ca_manager.export_root_certificate(Path(args.dest), der=args.der))

    elif command == "info":
        info = {"root_ca": ca_manager.get_root_ca_info()}
        if config.server_cert_path.exists():
            info["server"] = issuer.get_server_certificate_info()
        print(json.dumps(info, indent=2))

    elif command == "verify":
        issuer.verify_server_certificate(hostname=args.hostname)
        print(f"OK: {config.server_cert_path} is valid for {args.hostname}")


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point. Returns the process exit status."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        config = build_config(args)
        _run(args, config)
    except (ValidationError, ValueError, TypeError, OSError, CertificateVerificationError) as e:
        if args.debug:
            raise
        logger.error(f"{args.command} failed: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
