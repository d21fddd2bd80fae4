"""Root Certificate Authority management module."""

from pathlib import Path
from typing import Optional
import logging

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives import serialization

from tls_utils import X509Utils, CertificateVerifier, CertificateFormatConverter
from .models import ProvisioningConfig

logger = logging.getLogger(__name__)


class CAManager:
    """Manages the local root Certificate Authority and its storage."""

    def __init__(self, config: ProvisioningConfig):
        """
        Initialize CA Manager.

        Args:
            config: Provisioning configuration (paths and CA settings)
        """
        self.config = config
        self.config.output_dir.mkdir(parents=True, exist_ok=True)

        # CA cache
        self._root_private_key: Optional[rsa.RSAPrivateKey] = None
        self._root_cert: Optional[x509.Certificate] = None

        logger.info(f"CA Manager initialized with output directory: {config.output_dir}")

    def root_ca_exists(self) -> bool:
        return self.config.root_key_path.exists() and self.config.root_cert_path.exists()

    def initialize_root_ca(
        self,
        passphrase: bytes,
        force: bool = False
    ) -> tuple[rsa.RSAPrivateKey, x509.Certificate]:
        """
        Initialize or load the root CA.

        The root key is always stored encrypted with the passphrase.

        Args:
            passphrase: Passphrase protecting the root CA private key
            force: Force recreation of the root CA

        Returns:
            Tuple of (private_key, certificate)

        Raises:
            ValueError: If the passphrase is empty
        """
        if not passphrase:
            raise ValueError("A passphrase is required to protect the root CA key")

        if not force and self.root_ca_exists():
            logger.info("Loading existing root CA")
            return self.get_root_ca(passphrase)

        logger.info("Creating new root CA")
        root_config = self.config.root_ca
        private_key, cert = X509Utils.create_root_ca(
            subject=root_config.subject.to_x509_name(),
            key_size=root_config.key_size,
            validity_days=root_config.validity_days
        )

        X509Utils.save_private_key(private_key, self.config.root_key_path, password=passphrase)
        X509Utils.save_certificate(cert, self.config.root_cert_path)

        self._root_private_key = private_key
        self._root_cert = cert

        logger.info(f"Root CA initialized: {root_config.subject.common_name}")
        return private_key, cert

    def get_root_ca(self, passphrase: bytes) -> tuple[rsa.RSAPrivateKey, x509.Certificate]:
        """
        Get root CA (load from cache or disk).

        Args:
            passphrase: Passphrase protecting the root CA private key

        Returns:
            Tuple of (private_key, certificate)

        Raises:
            FileNotFoundError: If root CA not initialized
            ValueError: If the passphrase does not decrypt the key
        """
        if self._root_private_key and self._root_cert:
            return self._root_private_key, self._root_cert

        if not self.root_ca_exists():
            raise FileNotFoundError("Root CA not initialized. Call initialize_root_ca() first.")

        self._root_private_key = X509Utils.load_private_key(self.config.root_key_path, password=passphrase)
        self._root_cert = X509Utils.load_certificate(self.config.root_cert_path)

        return self._root_private_key, self._root_cert

    def get_root_certificate(self) -> x509.Certificate:
        """
        Get the root CA certificate without unlocking the key.

        Raises:
            FileNotFoundError: If root CA not initialized
        """
        if self._root_cert:
            return self._root_cert

        if not self.config.root_cert_path.exists():
            raise FileNotFoundError("Root CA not initialized. Call initialize_root_ca() first.")

        return X509Utils.load_certificate(self.config.root_cert_path)

    def get_root_ca_info(self) -> dict:
        """
        Get root CA information.

        Returns:
            Dictionary with root CA details
        """
        root_cert = self.get_root_certificate()

        return {
            "subject": root_cert.subject.rfc4514_string(),
            "serial_number": str(root_cert.serial_number),
            "not_valid_before": root_cert.not_valid_before_utc.isoformat(),
            "not_valid_after": root_cert.not_valid_after_utc.isoformat(),
            "fingerprint_sha256": CertificateVerifier.get_certificate_fingerprint(root_cert),
        }

    def export_root_certificate(self, dest: Path, der: bool = False) -> Path:
        """
        Write a copy of the root certificate for import into a trust store.

        Args:
            dest: Destination file
            der: Write DER instead of PEM

        Returns:
            Destination path
        """
        root_cert = self.get_root_certificate()
        pem = root_cert.public_bytes(serialization.Encoding.PEM)

        dest = Path(dest)
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(CertificateFormatConverter.pem_to_der(pem) if der else pem)

        logger.info(f"Root CA certificate exported to: {dest} ({'DER' if der else 'PEM'})")
        return dest
