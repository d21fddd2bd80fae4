"""Pytest configuration and shared fixtures for provisioning and listener tests."""

import pytest
import tempfile
import shutil
from pathlib import Path
from typing import Generator

from cert_provisioning import CAManager, CertificateIssuer, ProvisioningConfig

from .utils.test_helpers import find_free_port


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test artifacts."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def passphrase() -> bytes:
    """Root CA key passphrase used across tests."""
    return b"correct horse battery staple"


@pytest.fixture
def provisioning_config(temp_dir: Path) -> ProvisioningConfig:
    """Provide a provisioning configuration writing into the temp directory."""
    return ProvisioningConfig(output_dir=temp_dir / "certs")


@pytest.fixture
def ca_manager(provisioning_config: ProvisioningConfig) -> CAManager:
    """CA manager without an initialized root CA."""
    return CAManager(provisioning_config)


@pytest.fixture
def issuer(ca_manager: CAManager) -> CertificateIssuer:
    """Certificate issuer bound to the CA manager."""
    return CertificateIssuer(ca_manager)


@pytest.fixture
def provisioned(ca_manager: CAManager, issuer: CertificateIssuer, passphrase: bytes):
    """Run the full provisioning procedure and return its result."""
    ca_manager.initialize_root_ca(passphrase)
    return issuer.issue_server_certificate(passphrase)


@pytest.fixture
def free_port() -> int:
    """An unused local TCP port."""
    return find_free_port()
