"""Certificate provisioning - local root CA and localhost server certificate."""

from .ca_manager import CAManager
from .cert_issuer import CertificateIssuer
from .models import ProvisioningConfig, ProvisioningResult

__all__ = ['CAManager', 'CertificateIssuer', 'ProvisioningConfig', 'ProvisioningResult']
