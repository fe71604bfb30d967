"""
Settings validation for DHCP HA.

Every rule runs; the caller gets all violations at once, in a stable
order, as user-facing messages. An empty list means valid.
"""
import ipaddress
import re
from typing import List

from dhcpha.dhcp.models import DhcpSettings, MutualTls, NoTls, ROLES, TUNING_FIELDS

_HOSTNAME_LABEL = re.compile(r'(?!-)[A-Za-z0-9_-]{1,63}(?<!-)')
_DIGITS = re.compile(r'[0-9]+')

TUNING_LABELS = {
    'heartbeatdelay': 'Heartbeat delay',
    'maxresponsedelay': 'Maximum response delay',
    'maxackdelay': 'Maximum acknowledgement delay',
    'maxunackedclients': 'Maximum unacknowledged clients',
    'maxrejectedleaseupdates': 'Maximum rejected lease updates',
}


def is_hostname_like(value: str) -> bool:
    """Hostname syntax: dot-separated labels of letters, digits, '-' and '_'."""
    if not value or len(value) > 255:
        return False
    labels = value[:-1].split('.') if value.endswith('.') else value.split('.')
    return all(_HOSTNAME_LABEL.fullmatch(label) for label in labels)


def is_ip_address(value: str) -> bool:
    """True for any IPv4 or IPv6 literal (no prefix length, no scope id)."""
    if '%' in value:
        return False
    try:
        ipaddress.ip_address(value)
        return True
    except ValueError:
        return False


def is_digits(value: str) -> bool:
    """True when value is one or more ASCII digits."""
    return _DIGITS.fullmatch(value) is not None


def is_port(value: str) -> bool:
    return is_digits(value) and 1 <= int(value) <= 65535


def validate(settings: DhcpSettings, certificates=None) -> List[str]:
    """
    Check a proposed settings snapshot.

    Args:
        settings: Proposed settings
        certificates: Optional CertificateDirectory; when given, TLS
            certificate references are checked against it

    Returns:
        List of error messages, empty when the settings are valid
    """
    errors: List[str] = []
    ha = settings.ha

    if ha.localname and not is_hostname_like(ha.localname):
        errors.append(f'The local name "{ha.localname}" is not a valid hostname.')

    if ha.remotename:
        if not is_hostname_like(ha.remotename):
            errors.append(f'The remote name "{ha.remotename}" is not a valid hostname.')
    elif ha.enable:
        errors.append('A remote name is required when high availability is enabled.')

    for label, value in (('local', ha.localip), ('remote', ha.remoteip)):
        if value:
            if not is_ip_address(value):
                errors.append(f'The {label} address "{value}" is not a valid IPv4 or IPv6 address.')
        elif ha.enable:
            errors.append(f'A {label} address is required when high availability is enabled.')

    for label, value in (('local', ha.localport), ('remote', ha.remoteport)):
        if value and not is_port(value):
            errors.append(f'The {label} port "{value}" is not a valid port number.')

    if ha.role and ha.role not in ROLES:
        errors.append(f'The role "{ha.role}" must be one of: {", ".join(ROLES)}.')

    for name in TUNING_FIELDS:
        value = getattr(ha, name)
        if value and not is_digits(value):
            errors.append(f'{TUNING_LABELS[name]} must be a non-negative whole number.')

    errors.extend(_validate_certificates(settings, certificates))
    return errors


def _validate_certificates(settings: DhcpSettings, certificates) -> List[str]:
    tls = settings.ha.tls
    if certificates is None or isinstance(tls, NoTls):
        return []

    errors: List[str] = []
    if tls.server_cert not in certificates.server_certificates():
        errors.append('TLS requires a valid server certificate.')
    if isinstance(tls, MutualTls) and tls.client_cert not in certificates.client_certificates():
        errors.append('Mutual TLS requires a valid client certificate.')
    return errors
