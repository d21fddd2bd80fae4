"""X.509 key, certificate and CSR generation utilities."""

from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple
from pathlib import Path
import ipaddress
import logging

from cryptography import x509
from cryptography.x509.oid import NameOID, ExtendedKeyUsageOID
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.backends import default_backend

logger = logging.getLogger(__name__)


class X509Utils:
    """Utility class for X.509 certificate operations."""

    @staticmethod
    def generate_private_key(key_size: int = 2048) -> rsa.RSAPrivateKey:
        """
        Generate an RSA private key.

        Args:
            key_size: Size of the RSA key in bits (default: 2048)

        Returns:
            RSA private key object
        """
        logger.info(f"Generating {key_size}-bit RSA private key")
        return rsa.generate_private_key(
            public_exponent=65537,
            key_size=key_size,
            backend=default_backend()
        )

    @staticmethod
    def build_subject(
        common_name: str,
        country: Optional[str] = None,
        state: Optional[str] = None,
        locality: Optional[str] = None,
        organization: Optional[str] = None,
        organizational_unit: Optional[str] = None,
        email: Optional[str] = None,
    ) -> x509.Name:
        """Build a distinguished name, skipping empty fields."""
        fields = [
            (NameOID.COUNTRY_NAME, country),
            (NameOID.STATE_OR_PROVINCE_NAME, state),
            (NameOID.LOCALITY_NAME, locality),
            (NameOID.ORGANIZATION_NAME, organization),
            (NameOID.ORGANIZATIONAL_UNIT_NAME, organizational_unit),
            (NameOID.COMMON_NAME, common_name),
            (NameOID.EMAIL_ADDRESS, email),
        ]
        return x509.Name([
            x509.NameAttribute(oid, value) for oid, value in fields if value
        ])

    @staticmethod
    def create_root_ca(
        subject: x509.Name,
        private_key: Optional[rsa.RSAPrivateKey] = None,
        key_size: int = 2048,
        validity_days: int = 1825
    ) -> Tuple[rsa.RSAPrivateKey, x509.Certificate]:
        """
        Create a self-signed root CA certificate.

        Args:
            subject: Distinguished name, used as both subject and issuer
            private_key: Existing key to sign with (generated if omitted)
            key_size: Key size used when a key has to be generated
            validity_days: Certificate validity period in days

        Returns:
            Tuple of (private_key, certificate)
        """
        logger.info(f"Creating root CA: {subject.rfc4514_string()}")

        if private_key is None:
            private_key = X509Utils.generate_private_key(key_size=key_size)

        now = datetime.now(timezone.utc)

        cert = (
            x509.CertificateBuilder()
            .subject_name(subject)
            .issuer_name(subject)
            .public_key(private_key.public_key())
            .serial_number(x509.random_serial_number())
            .not_valid_before(now)
            .not_valid_after(now + timedelta(days=validity_days))
            .add_extension(
                x509.BasicConstraints(ca=True, path_length=None),
                critical=True,
            )
            .add_extension(
                x509.KeyUsage(
                    digital_signature=True,
                    key_cert_sign=True,
                    crl_sign=True,
                    key_encipherment=False,
                    content_commitment=False,
                    data_encipherment=False,
                    key_agreement=False,
                    encipher_only=False,
                    decipher_only=False,
                ),
                critical=True,
            )
            .add_extension(
                x509.SubjectKeyIdentifier.from_public_key(private_key.public_key()),
                critical=False,
            )
            .sign(private_key, hashes.SHA256(), backend=default_backend())
        )

        logger.info(f"Root CA created successfully (serial: {cert.serial_number})")
        return private_key, cert

    @staticmethod
    def _san_entries(
        san_dns_names: Optional[list] = None,
        san_ip_addresses: Optional[list] = None
    ) -> list:
        san_list = [x509.DNSName(name) for name in san_dns_names or []]
        san_list.extend(
            x509.IPAddress(ipaddress.ip_address(ip)) for ip in san_ip_addresses or []
        )
        return san_list

    @staticmethod
    def create_csr(
        private_key: rsa.RSAPrivateKey,
        subject: x509.Name,
        san_dns_names: Optional[list] = None,
        san_ip_addresses: Optional[list] = None
    ) -> x509.CertificateSigningRequest:
        """
        Create a certificate signing request with a Subject Alternative Name extension.

        Args:
            private_key: Key the request is signed with
            subject: Requested subject
            san_dns_names: DNS names the certificate should be valid for
            san_ip_addresses: IP addresses the certificate should be valid for

        Returns:
            Signed CSR

        Raises:
            ValueError: If no SAN entry is given or an IP address is malformed
        """
        san_list = X509Utils._san_entries(san_dns_names, san_ip_addresses)
        if not san_list:
            raise ValueError("At least one Subject Alternative Name is required")

        logger.info(f"Creating CSR for: {subject.rfc4514_string()}")

        csr = (
            x509.CertificateSigningRequestBuilder()
            .subject_name(subject)
            .add_extension(x509.SubjectAlternativeName(san_list), critical=False)
            .sign(private_key, hashes.SHA256(), backend=default_backend())
        )

        logger.info(f"Added SANs: DNS={san_dns_names}, IP={san_ip_addresses}")
        return csr

    @staticmethod
    def sign_csr(
        csr: x509.CertificateSigningRequest,
        ca_private_key: rsa.RSAPrivateKey,
        ca_cert: x509.Certificate,
        validity_days: int = 825
    ) -> x509.Certificate:
        """
        Issue a server certificate for a CSR, signed by the CA.

        The subject, public key and Subject Alternative Names are taken from
        the request.

        Args:
            csr: Certificate signing request
            ca_private_key: CA private key for signing
            ca_cert: CA certificate
            validity_days: Certificate validity period in days

        Returns:
            Signed certificate

        Raises:
            ValueError: If the CSR signature is invalid
        """
        if not csr.is_signature_valid:
            raise ValueError("CSR signature is invalid")

        logger.info(f"Signing CSR for: {csr.subject.rfc4514_string()}")

        now = datetime.now(timezone.utc)

        builder = (
            x509.CertificateBuilder()
            .subject_name(csr.subject)
            .issuer_name(ca_cert.subject)
            .public_key(csr.public_key())
            .serial_number(x509.random_serial_number())
            .not_valid_before(now)
            .not_valid_after(now + timedelta(days=validity_days))
            .add_extension(
                x509.BasicConstraints(ca=False, path_length=None),
                critical=True,
            )
            .add_extension(
                x509.KeyUsage(
                    digital_signature=True,
                    content_commitment=True,
                    key_encipherment=True,
                    data_encipherment=True,
                    key_cert_sign=False,
                    crl_sign=False,
                    key_agreement=False,
                    encipher_only=False,
                    decipher_only=False,
                ),
                critical=True,
            )
            .add_extension(
                x509.ExtendedKeyUsage([ExtendedKeyUsageOID.SERVER_AUTH]),
                critical=False,
            )
            .add_extension(
                x509.SubjectKeyIdentifier.from_public_key(csr.public_key()),
                critical=False,
            )
            .add_extension(
                x509.AuthorityKeyIdentifier.from_issuer_public_key(ca_private_key.public_key()),
                critical=False,
            )
        )

        try:
            san = csr.extensions.get_extension_for_class(x509.SubjectAlternativeName)
            builder = builder.add_extension(san.value, critical=san.critical)
        except x509.ExtensionNotFound:
            logger.warning("CSR carries no Subject Alternative Name extension")

        cert = builder.sign(ca_private_key, hashes.SHA256(), backend=default_backend())

        logger.info(f"Certificate issued (serial: {cert.serial_number}, valid for {validity_days} days)")
        return cert

    @staticmethod
    def save_private_key(private_key: rsa.RSAPrivateKey, path: Path, password: Optional[bytes] = None):
        """
        Save private key to file.

        Args:
            private_key: RSA private key to save
            path: File path to save to
            password: Optional password for encryption
        """
        logger.info(f"Saving private key to: {path}")

        if password:
            encryption = serialization.BestAvailableEncryption(password)
        else:
            encryption = serialization.NoEncryption()

        pem = private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=encryption
        )

        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(pem)
        path.chmod(0o600)  # Restrict permissions

        logger.info("Private key saved successfully")

    @staticmethod
    def save_certificate(cert: x509.Certificate, path: Path):
        """Save certificate to file in PEM format."""
        logger.info(f"Saving certificate to: {path}")

        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(cert.public_bytes(serialization.Encoding.PEM))

    @staticmethod
    def save_csr(csr: x509.CertificateSigningRequest, path: Path):
        """Save CSR to file in PEM format."""
        logger.info(f"Saving CSR to: {path}")

        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(csr.public_bytes(serialization.Encoding.PEM))

    @staticmethod
    def load_private_key(path: Path, password: Optional[bytes] = None) -> rsa.RSAPrivateKey:
        """
        Load private key from file.

        Args:
            path: File path to load from
            password: Optional password for decryption

        Returns:
            RSA private key object
        """
        logger.info(f"Loading private key from: {path}")

        pem_data = Path(path).read_bytes()

        private_key = serialization.load_pem_private_key(
            pem_data,
            password=password,
            backend=default_backend()
        )

        logger.info("Private key loaded successfully")
        return private_key

    @staticmethod
    def load_certificate(path: Path) -> x509.Certificate:
        """Load a PEM certificate from file."""
        logger.info(f"Loading certificate from: {path}")

        pem_data = Path(path).read_bytes()
        return x509.load_pem_x509_certificate(pem_data, default_backend())

    @staticmethod
    def load_csr(path: Path) -> x509.CertificateSigningRequest:
        """Load a PEM CSR from file."""
        logger.info(f"Loading CSR from: {path}")

        pem_data = Path(path).read_bytes()
        return x509.load_pem_x509_csr(pem_data, default_backend())
