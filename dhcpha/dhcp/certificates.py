"""
Certificate directory over the 'cert' section of the configuration.

Each entry carries a refid, a description and base64-encoded PEM
certificate ('crt') and private key ('prv'). The purpose of a
certificate is read from its extended key usage with cryptography.
"""
import base64
import binascii
import logging
from typing import Any, Dict, List, Optional, Tuple

from cryptography import x509
from cryptography.x509.oid import ExtendedKeyUsageOID

from dhcpha.store import ConfigStore

logger = logging.getLogger('dhcpha')

SERVER = 'server'
CLIENT = 'client'


def _decode_pem(value: Optional[str]) -> Optional[bytes]:
    if not value:
        return None
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        return None


def certificate_purpose(pem: bytes) -> Dict[str, bool]:
    """Return {'server': bool, 'client': bool} from the certificate's extended key usage."""
    certificate = x509.load_pem_x509_certificate(pem)
    try:
        usage = certificate.extensions.get_extension_for_class(x509.ExtendedKeyUsage).value
    except x509.ExtensionNotFound:
        return {SERVER: False, CLIENT: False}
    return {
        SERVER: ExtendedKeyUsageOID.SERVER_AUTH in usage,
        CLIENT: ExtendedKeyUsageOID.CLIENT_AUTH in usage,
    }


class CertificateDirectory:
    """Lookup of stored certificates by reference and purpose."""

    def __init__(self, store: ConfigStore):
        self.store = store

    def _entries(self) -> List[Dict[str, Any]]:
        entries = self.store.get('cert', [])
        return entries if isinstance(entries, list) else []

    def list_certificates(self, usage: Optional[str] = None) -> Dict[str, Dict[str, Any]]:
        """
        Map refid to certificate metadata.

        Args:
            usage: 'server' keeps certificates valid for server auth,
                'client' keeps pure client-auth certificates (client auth
                without server auth), None keeps everything parseable

        Returns:
            Ordered mapping of refid to {'descr', 'server', 'client'}
        """
        if usage not in (None, SERVER, CLIENT):
            raise ValueError(f"Unknown certificate usage: {usage}")

        result: Dict[str, Dict[str, Any]] = {}
        for entry in self._entries():
            refid = entry.get('refid')
            pem = _decode_pem(entry.get('crt'))
            if not refid or pem is None:
                continue
            try:
                purpose = certificate_purpose(pem)
            except ValueError as e:
                logger.warning(f"Skipping unreadable certificate {refid}: {str(e)}")
                continue

            if usage == SERVER and not purpose[SERVER]:
                continue
            if usage == CLIENT and (purpose[SERVER] or not purpose[CLIENT]):
                continue

            result[refid] = {'descr': entry.get('descr', refid), **purpose}
        return result

    def server_certificates(self) -> Dict[str, Dict[str, Any]]:
        return self.list_certificates(SERVER)

    def client_certificates(self) -> Dict[str, Dict[str, Any]]:
        return self.list_certificates(CLIENT)

    def get_pem_pair(self, refid: str) -> Tuple[Optional[bytes], Optional[bytes]]:
        """Return (certificate PEM, private key PEM) for a reference."""
        for entry in self._entries():
            if entry.get('refid') == refid:
                return _decode_pem(entry.get('crt')), _decode_pem(entry.get('prv'))
        return None, None
