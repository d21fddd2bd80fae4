"""Certificate format conversion utilities."""

import logging

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.backends import default_backend

logger = logging.getLogger(__name__)


class CertificateFormatConverter:
    """Convert certificates between different formats."""

    @staticmethod
    def pem_to_der(pem_data: bytes) -> bytes:
        """
        Convert PEM certificate to DER format.

        Windows and some browsers import root certificates as ``.cer``/``.der``.

        Args:
            pem_data: PEM-encoded certificate bytes

        Returns:
            DER-encoded certificate bytes
        """
        cert = x509.load_pem_x509_certificate(pem_data, default_backend())
        return cert.public_bytes(serialization.Encoding.DER)
