"""Configuration and result models for certificate provisioning."""

from pathlib import Path
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field

from tls_utils import X509Utils


class DistinguishedName(BaseModel):
    """Distinguished name fields for a certificate subject."""

    common_name: str = Field(..., min_length=1, max_length=64, description="Common name (CN)")
    country: Optional[str] = Field("US", min_length=2, max_length=2, description="Two-letter country code")
    state: Optional[str] = Field(None, description="State or province name")
    locality: Optional[str] = Field(None, description="Locality (city) name")
    organization: Optional[str] = Field(None, description="Organization name")
    organizational_unit: Optional[str] = Field(None, description="Organizational unit name")
    email: Optional[str] = Field(None, description="Email address")

    def to_x509_name(self):
        return X509Utils.build_subject(**self.model_dump())


class RootCAConfig(BaseModel):
    """Settings for the root certificate authority."""

    key_size: int = Field(default=2048, ge=2048, le=8192, description="RSA key size in bits")
    validity_days: int = Field(default=1825, ge=1, le=36500, description="CA validity in days")
    subject: DistinguishedName = Field(
        default_factory=lambda: DistinguishedName(
            common_name="Localhost Root CA",
            organization="Localhost Development",
        ),
        description="Root CA subject",
    )


class ServerCertConfig(BaseModel):
    """Settings for the server certificate."""

    key_size: int = Field(default=2048, ge=2048, le=8192, description="RSA key size in bits")
    validity_days: int = Field(default=825, ge=1, le=825, description="Certificate validity in days (browser maximum)")
    subject: DistinguishedName = Field(
        default_factory=lambda: DistinguishedName(
            common_name="localhost",
            organization="Localhost Development",
        ),
        description="Server certificate subject",
    )
    san_dns_names: list[str] = Field(default_factory=lambda: ["localhost"], description="Subject Alternative Names - DNS names")
    san_ip_addresses: list[str] = Field(default_factory=list, description="Subject Alternative Names - IP addresses")


class ProvisioningConfig(BaseModel):
    """Where provisioning artifacts live and how they are generated."""

    output_dir: Path = Field(default=Path("."), description="Directory for all generated files")
    root_key_file: str = Field(default="rootCA.key", description="Encrypted root CA private key")
    root_cert_file: str = Field(default="rootCA.pem", description="Root CA certificate")
    server_key_file: str = Field(default="server.key", description="Server private key")
    server_csr_file: str = Field(default="server.csr", description="Server certificate signing request")
    server_cert_file: str = Field(default="server.crt", description="Server certificate")
    openssl_config_file: str = Field(default="openssl.cnf", description="OpenSSL request config")
    root_ca: RootCAConfig = Field(default_factory=RootCAConfig)
    server: ServerCertConfig = Field(default_factory=ServerCertConfig)

    @property
    def root_key_path(self) -> Path:
        return self.output_dir / self.root_key_file

    @property
    def root_cert_path(self) -> Path:
        return self.output_dir / self.root_cert_file

    @property
    def server_key_path(self) -> Path:
        return self.output_dir / self.server_key_file

    @property
    def server_csr_path(self) -> Path:
        return self.output_dir / self.server_csr_file

    @property
    def server_cert_path(self) -> Path:
        return self.output_dir / self.server_cert_file

    @property
    def openssl_config_path(self) -> Path:
        return self.output_dir / self.openssl_config_file


class ProvisioningResult(BaseModel):
    """Outcome of issuing a server certificate."""

    server_key_path: Path = Field(..., description="Path of the server private key")
    server_csr_path: Path = Field(..., description="Path of the CSR")
    server_cert_path: Path = Field(..., description="Path of the server certificate")
    root_cert_path: Path = Field(..., description="Path of the root CA certificate")
    serial_number: str = Field(..., description="Server certificate serial number")
    not_valid_before: datetime = Field(..., description="Certificate start date")
    not_valid_after: datetime = Field(..., description="Certificate expiration date")
    fingerprint_sha256: str = Field(..., description="SHA-256 fingerprint")
    san_names: list[str] = Field(..., description="DNS names and IP addresses covered")
