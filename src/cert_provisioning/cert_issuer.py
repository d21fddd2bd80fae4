"""Server certificate issuance module."""

import logging

from cryptography import x509

from tls_utils import X509Utils, CertificateVerifier, CertificateVerificationError
from .ca_manager import CAManager
from .models import ProvisioningResult

logger = logging.getLogger(__name__)


class CertificateIssuer:
    """Issues the server key, CSR and certificate signed by the root CA."""

    def __init__(self, ca_manager: CAManager):
        """
        Initialize Certificate Issuer.

        Args:
            ca_manager: CA Manager instance
        """
        self.ca_manager = ca_manager
        self.config = ca_manager.config

    def issue_server_certificate(self, passphrase: bytes) -> ProvisioningResult:
        """
        Issue a server certificate.

        Generates a fresh server key, writes a CSR carrying the configured
        Subject Alternative Names and signs it with the root CA.

        Args:
            passphrase: Passphrase protecting the root CA private key

        Returns:
            Provisioning result with paths and certificate details

        Raises:
            FileNotFoundError: If the root CA has not been initialized
        """
        server_config = self.config.server
        logger.info(f"Issuing server certificate for: {server_config.subject.common_name}")

        ca_private_key, ca_cert = self.ca_manager.get_root_ca(passphrase)

        # The listener reads this key directly, so it is stored unencrypted
        private_key = X509Utils.generate_private_key(key_size=server_config.key_size)
        X509Utils.save_private_key(private_key, self.config.server_key_path)

        csr = X509Utils.create_csr(
            private_key,
            server_config.subject.to_x509_name(),
            san_dns_names=server_config.san_dns_names,
            san_ip_addresses=server_config.san_ip_addresses
        )
        X509Utils.save_csr(csr, self.config.server_csr_path)

        cert = X509Utils.sign_csr(
            csr,
            ca_private_key,
            ca_cert,
            validity_days=server_config.validity_days
        )
        X509Utils.save_certificate(cert, self.config.server_cert_path)

        logger.info(f"Server certificate issued: {server_config.subject.common_name} (serial: {cert.serial_number})")

        return ProvisioningResult(
            server_key_path=self.config.server_key_path,
            server_csr_path=self.config.server_csr_path,
            server_cert_path=self.config.server_cert_path,
            root_cert_path=self.config.root_cert_path,
            serial_number=str(cert.serial_number),
            not_valid_before=cert.not_valid_before_utc,
            not_valid_after=cert.not_valid_after_utc,
            fingerprint_sha256=CertificateVerifier.get_certificate_fingerprint(cert),
            san_names=CertificateVerifier.get_san_names(cert),
        )

    def get_server_certificate(self) -> x509.Certificate:
        """
        Load the current server certificate.

        Raises:
            FileNotFoundError: If no server certificate has been issued
        """
        return X509Utils.load_certificate(self.config.server_cert_path)

    def get_server_certificate_info(self) -> dict:
        """
        Get information about the current server certificate.

        Returns:
            Dictionary with certificate details
        """
        cert = self.get_server_certificate()

        return {
            "subject": cert.subject.rfc4514_string(),
            "issuer": cert.issuer.rfc4514_string(),
            "serial_number": str(cert.serial_number),
            "san_names": CertificateVerifier.get_san_names(cert),
            "not_valid_before": cert.not_valid_before_utc.isoformat(),
            "not_valid_after": cert.not_valid_after_utc.isoformat(),
            "fingerprint_sha256": CertificateVerifier.get_certificate_fingerprint(cert),
        }

    def verify_server_certificate(self, hostname: str = "localhost") -> bool:
        """
        Verify the on-disk server certificate and key.

        Args:
            hostname: Host name the certificate must cover

        Returns:
            True if the certificate chains to the root CA, covers the
            hostname and matches the server key

        Raises:
            CertificateVerificationError: If verification fails
        """
        cert = self.get_server_certificate()
        root_cert = self.ca_manager.get_root_certificate()

        CertificateVerifier.verify_server_certificate(cert, root_cert, hostname=hostname)

        private_key = X509Utils.load_private_key(self.config.server_key_path)
        if not CertificateVerifier.key_matches_certificate(private_key, cert):
            raise CertificateVerificationError(
                f"{self.config.server_key_path} does not match {self.config.server_cert_path}"
            )

        logger.info(f"Server certificate verified for host: {hostname}")
        return True
