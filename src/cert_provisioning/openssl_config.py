"""OpenSSL request configuration matching the provisioning defaults.

The generated file lets the same server CSR be produced by hand::

    openssl req -new -key server.key -out server.csr -config openssl.cnf
    openssl x509 -req -in server.csr -CA rootCA.pem -CAkey rootCA.key \\
        -CAcreateserial -out server.crt -days 825 -sha256 \\
        -extfile openssl.cnf -extensions v3_req
"""

import logging
from pathlib import Path

from .models import ProvisioningConfig

logger = logging.getLogger(__name__)

# (prompt key, prompt text, DistinguishedName attribute)
DN_PROMPTS = [
    ("countryName", "Country Name (2 letter code)", "country"),
    ("stateOrProvinceName", "State or Province Name (full name)", "state"),
    ("localityName", "Locality Name (eg, city)", "locality"),
    ("organizationName", "Organization Name (eg, company)", "organization"),
    ("organizationalUnitName", "Organizational Unit Name (eg, section)", "organizational_unit"),
    ("commonName", "Common Name (e.g. server FQDN or YOUR name)", "common_name"),
    ("emailAddress", "Email Address", "email"),
]


def render_openssl_config(config: ProvisioningConfig) -> str:
    """Render the OpenSSL config text for the server certificate request."""
    server = config.server

    lines = [
        "[req]",
        f"default_bits = {server.key_size}",
        "prompt = yes",
        "default_md = sha256",
        "distinguished_name = req_distinguished_name",
        "req_extensions = v3_req",
        "",
        "[req_distinguished_name]",
    ]

    for key, prompt, attr in DN_PROMPTS:
        lines.append(f"{key} = {prompt}")
        default = getattr(server.subject, attr)
        if default:
            lines.append(f"{key}_default = {default}")

    lines += [
        "",
        "[v3_req]",
        "basicConstraints = CA:FALSE",
        "keyUsage = digitalSignature, nonRepudiation, keyEncipherment, dataEncipherment",
        "extendedKeyUsage = serverAuth",
        "subjectAltName = @alt_names",
        "",
        "[alt_names]",
    ]
    lines += [f"DNS.{i} = {name}" for i, name in enumerate(server.san_dns_names, start=1)]
    lines += [f"IP.{i} = {ip}" for i, ip in enumerate(server.san_ip_addresses, start=1)]

    return "\n".join(lines) + "\n"


def write_openssl_config(config: ProvisioningConfig) -> Path:
    """Write the OpenSSL config into the output directory."""
    path = config.openssl_config_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_openssl_config(config))

    logger.info(f"OpenSSL config written to: {path}")
    return path
