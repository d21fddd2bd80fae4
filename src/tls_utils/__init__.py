"""Cryptographic utilities for local TLS provisioning."""

from .x509_utils import X509Utils
from .verification import CertificateVerifier, CertificateVerificationError
from .cert_formats import CertificateFormatConverter

__all__ = ['X509Utils', 'CertificateVerifier', 'CertificateVerificationError', 'CertificateFormatConverter']
