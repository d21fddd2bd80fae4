"""Certificate verification utilities."""

from typing import List, Optional
from datetime import datetime, timezone
import ipaddress
import logging

from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa

logger = logging.getLogger(__name__)


class CertificateVerificationError(Exception):
    """Exception raised when certificate verification fails."""
    pass


class CertificateVerifier:
    """Utility class for server certificate verification."""

    @staticmethod
    def verify_server_certificate(
        cert: x509.Certificate,
        root_cert: x509.Certificate,
        hostname: Optional[str] = None
    ) -> bool:
        """
        Verify a server certificate issued directly by a root CA.

        Args:
            cert: Server certificate to verify
            root_cert: Root CA certificate
            hostname: Host name (or IP address) the certificate must cover

        Returns:
            True if verification succeeds

        Raises:
            CertificateVerificationError: If verification fails
        """
        logger.info(f"Verifying server certificate: {cert.subject.rfc4514_string()}")

        try:
            CertificateVerifier._verify_signature(cert, root_cert)
            CertificateVerifier._verify_signature(root_cert, root_cert)
            logger.info("Server certificate signature verified against root CA")

            CertificateVerifier._verify_validity(cert)
            CertificateVerifier._verify_validity(root_cert)

            CertificateVerifier._verify_ca_constraints(root_cert)

            if hostname is not None:
                CertificateVerifier._verify_hostname(cert, hostname)
                logger.info(f"Certificate is valid for host: {hostname}")

        except CertificateVerificationError as e:
            logger.error(f"Server certificate verification failed: {e}")
            raise

        logger.info("Server certificate verification successful")
        return True

    @staticmethod
    def _verify_signature(cert: x509.Certificate, issuer_cert: x509.Certificate):
        """
        Verify that cert is signed by issuer_cert.

        Raises:
            CertificateVerificationError: If signature verification fails
        """
        if cert.issuer != issuer_cert.subject:
            raise CertificateVerificationError(
                f"Issuer mismatch: {cert.issuer.rfc4514_string()} != {issuer_cert.subject.rfc4514_string()}"
            )

        try:
            issuer_cert.public_key().verify(
                cert.signature,
                cert.tbs_certificate_bytes,
                padding.PKCS1v15(),
                cert.signature_hash_algorithm,
            )
        except InvalidSignature:
            raise CertificateVerificationError(
                f"Invalid signature: {cert.subject.rfc4514_string()} not signed by {issuer_cert.subject.rfc4514_string()}"
            )

    @staticmethod
    def _verify_validity(cert: x509.Certificate):
        """
        Verify certificate is within its validity period.

        Raises:
            CertificateVerificationError: If certificate is expired or not yet valid
        """
        now = datetime.now(timezone.utc)

        if now < cert.not_valid_before_utc:
            raise CertificateVerificationError(
                f"Certificate not yet valid: {cert.subject.rfc4514_string()} "
                f"(valid from {cert.not_valid_before_utc})"
            )

        if now > cert.not_valid_after_utc:
            raise CertificateVerificationError(
                f"Certificate expired: {cert.subject.rfc4514_string()} "
                f"(expired on {cert.not_valid_after_utc})"
            )

    @staticmethod
    def _verify_ca_constraints(cert: x509.Certificate):
        try:
            basic_constraints = cert.extensions.get_extension_for_oid(
                x509.oid.ExtensionOID.BASIC_CONSTRAINTS
            ).value
        except x509.ExtensionNotFound:
            raise CertificateVerificationError(
                "Basic constraints extension not found in CA certificate"
            )

        if not basic_constraints.ca:
            raise CertificateVerificationError(
                f"Certificate is not a CA: {cert.subject.rfc4514_string()}"
            )

    @staticmethod
    def _verify_hostname(cert: x509.Certificate, hostname: str):
        try:
            address = ipaddress.ip_address(hostname)
        except ValueError:
            address = None

        try:
            san = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName).value
        except x509.ExtensionNotFound:
            raise CertificateVerificationError(
                f"Certificate has no Subject Alternative Name extension: {cert.subject.rfc4514_string()}"
            )

        if address is not None:
            matched = address in san.get_values_for_type(x509.IPAddress)
        else:
            names = [name.lower() for name in san.get_values_for_type(x509.DNSName)]
            matched = hostname.lower() in names

        if not matched:
            raise CertificateVerificationError(
                f"Hostname {hostname} not in certificate SANs: {CertificateVerifier.get_san_names(cert)}"
            )

    @staticmethod
    def get_san_names(cert: x509.Certificate) -> List[str]:
        """
        Get the DNS names and IP addresses listed in the SAN extension.

        Returns:
            List of names (empty if the extension is absent)
        """
        try:
            san = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName).value
        except x509.ExtensionNotFound:
            return []

        names = list(san.get_values_for_type(x509.DNSName))
        names.extend(str(ip) for ip in san.get_values_for_type(x509.IPAddress))
        return names

    @staticmethod
    def key_matches_certificate(private_key: rsa.RSAPrivateKey, cert: x509.Certificate) -> bool:
        """Check that a private key belongs to the certificate's public key."""
        return private_key.public_key().public_numbers() == cert.public_key().public_numbers()

    @staticmethod
    def get_certificate_fingerprint(cert: x509.Certificate, algorithm: str = "sha256") -> str:
        """
        Get certificate fingerprint.

        Args:
            cert: Certificate
            algorithm: Hash algorithm (sha256, sha1)

        Returns:
            Hex-encoded fingerprint
        """
        if algorithm == "sha256":
            digest = cert.fingerprint(hashes.SHA256())
        elif algorithm == "sha1":
            digest = cert.fingerprint(hashes.SHA1())
        else:
            raise ValueError(f"Unsupported algorithm: {algorithm}")

        return digest.hex()
