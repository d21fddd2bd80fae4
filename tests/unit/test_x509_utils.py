"""Unit tests for key, certificate and CSR primitives."""

import ipaddress

import pytest
from cryptography import x509
from cryptography.x509.oid import NameOID, ExtendedKeyUsageOID
from cryptography.hazmat.primitives.asymmetric import rsa

from tls_utils import X509Utils


@pytest.fixture
def root_ca():
    subject = X509Utils.build_subject(common_name="Unit Root CA", organization="TestOrg")
    return X509Utils.create_root_ca(subject, validity_days=30)


@pytest.fixture
def server_key():
    return X509Utils.generate_private_key()


class TestKeysAndSubjects:
    """Test key generation and distinguished names."""

    def test_generate_private_key_default_size(self):
        key = X509Utils.generate_private_key()
        assert isinstance(key, rsa.RSAPrivateKey)
        assert key.key_size == 2048
        assert key.public_key().public_numbers().e == 65537

    def test_generated_keys_are_random(self):
        first = X509Utils.generate_private_key()
        second = X509Utils.generate_private_key()
        assert first.private_numbers() != second.private_numbers()

    def test_build_subject_skips_empty_fields(self):
        name = X509Utils.build_subject(common_name="localhost", country="US", state=None, organization="")

        assert name.get_attributes_for_oid(NameOID.COMMON_NAME)[0].value == "localhost"
        assert name.get_attributes_for_oid(NameOID.COUNTRY_NAME)[0].value == "US"
        assert name.get_attributes_for_oid(NameOID.STATE_OR_PROVINCE_NAME) == []
        assert name.get_attributes_for_oid(NameOID.ORGANIZATION_NAME) == []


class TestRootCA:
    """Test self-signed root CA creation."""

    def test_root_ca_is_self_signed(self, root_ca):
        key, cert = root_ca
        assert cert.issuer == cert.subject
        assert cert.public_key().public_numbers() == key.public_key().public_numbers()

    def test_root_ca_basic_constraints(self, root_ca):
        _, cert = root_ca
        basic_constraints = cert.extensions.get_extension_for_class(x509.BasicConstraints)
        assert basic_constraints.value.ca is True
        assert basic_constraints.critical is True

    def test_root_ca_key_usage(self, root_ca):
        _, cert = root_ca
        key_usage = cert.extensions.get_extension_for_class(x509.KeyUsage).value
        assert key_usage.key_cert_sign is True
        assert key_usage.crl_sign is True
        assert key_usage.digital_signature is True

    def test_root_ca_validity(self, root_ca):
        _, cert = root_ca
        validity = cert.not_valid_after_utc - cert.not_valid_before_utc
        assert validity.days == 30

    def test_root_ca_with_existing_key(self, server_key):
        subject = X509Utils.build_subject(common_name="Reused Key CA")
        key, cert = X509Utils.create_root_ca(subject, private_key=server_key)
        assert key is server_key


class TestCSR:
    """Test certificate signing requests."""

    def test_csr_carries_san(self, server_key):
        subject = X509Utils.build_subject(common_name="localhost")
        csr = X509Utils.create_csr(server_key, subject, san_dns_names=["localhost"])

        assert csr.is_signature_valid
        san = csr.extensions.get_extension_for_class(x509.SubjectAlternativeName).value
        assert san.get_values_for_type(x509.DNSName) == ["localhost"]

    def test_csr_with_ip_addresses(self, server_key):
        subject = X509Utils.build_subject(common_name="localhost")
        csr = X509Utils.create_csr(
            server_key,
            subject,
            san_dns_names=["localhost"],
            san_ip_addresses=["127.0.0.1", "::1"],
        )

        san = csr.extensions.get_extension_for_class(x509.SubjectAlternativeName).value
        assert san.get_values_for_type(x509.IPAddress) == [
            ipaddress.ip_address("127.0.0.1"),
            ipaddress.ip_address("::1"),
        ]

    def test_csr_requires_san(self, server_key):
        subject = X509Utils.build_subject(common_name="localhost")
        with pytest.raises(ValueError):
            X509Utils.create_csr(server_key, subject)

    def test_csr_rejects_malformed_ip(self, server_key):
        subject = X509Utils.build_subject(common_name="localhost")
        with pytest.raises(ValueError):
            X509Utils.create_csr(server_key, subject, san_ip_addresses=["not-an-ip"])


class TestSignCSR:
    """Test issuing certificates from CSRs."""

    def test_signed_certificate_fields(self, root_ca, server_key):
        ca_key, ca_cert = root_ca
        subject = X509Utils.build_subject(common_name="localhost")
        csr = X509Utils.create_csr(server_key, subject, san_dns_names=["localhost", "myapp.test"])

        cert = X509Utils.sign_csr(csr, ca_key, ca_cert, validity_days=10)

        assert cert.subject == subject
        assert cert.issuer == ca_cert.subject
        assert cert.public_key().public_numbers() == server_key.public_key().public_numbers()
        assert (cert.not_valid_after_utc - cert.not_valid_before_utc).days == 10

    def test_signed_certificate_copies_san(self, root_ca, server_key):
        ca_key, ca_cert = root_ca
        csr = X509Utils.create_csr(
            server_key,
            X509Utils.build_subject(common_name="localhost"),
            san_dns_names=["localhost", "myapp.test"],
        )

        cert = X509Utils.sign_csr(csr, ca_key, ca_cert)

        san = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName).value
        assert san.get_values_for_type(x509.DNSName) == ["localhost", "myapp.test"]

    def test_signed_certificate_is_server_leaf(self, root_ca, server_key):
        ca_key, ca_cert = root_ca
        csr = X509Utils.create_csr(
            server_key,
            X509Utils.build_subject(common_name="localhost"),
            san_dns_names=["localhost"],
        )

        cert = X509Utils.sign_csr(csr, ca_key, ca_cert)

        assert cert.extensions.get_extension_for_class(x509.BasicConstraints).value.ca is False
        eku = cert.extensions.get_extension_for_class(x509.ExtendedKeyUsage).value
        assert ExtendedKeyUsageOID.SERVER_AUTH in eku
        aki = cert.extensions.get_extension_for_class(x509.AuthorityKeyIdentifier).value
        ski = ca_cert.extensions.get_extension_for_class(x509.SubjectKeyIdentifier).value
        assert aki.key_identifier == ski.digest


class TestPersistence:
    """Test saving and loading artifacts."""

    def test_round_trip_encrypted_key(self, temp_dir, server_key):
        path = temp_dir / "encrypted.key"
        X509Utils.save_private_key(server_key, path, password=b"secret")

        assert b"ENCRYPTED" in path.read_bytes()
        loaded = X509Utils.load_private_key(path, password=b"secret")
        assert loaded.private_numbers() == server_key.private_numbers()

    def test_round_trip_csr(self, temp_dir, server_key):
        csr = X509Utils.create_csr(
            server_key,
            X509Utils.build_subject(common_name="localhost"),
            san_dns_names=["localhost"],
        )
        path = temp_dir / "server.csr"
        X509Utils.save_csr(csr, path)

        assert path.read_bytes().startswith(b"-----BEGIN CERTIFICATE REQUEST-----")
        assert X509Utils.load_csr(path).subject == csr.subject

    def test_load_missing_certificate(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            X509Utils.load_certificate(temp_dir / "missing.crt")

    def test_load_corrupt_certificate(self, temp_dir):
        path = temp_dir / "corrupt.crt"
        path.write_text("not a certificate")
        with pytest.raises(ValueError):
            X509Utils.load_certificate(path)
