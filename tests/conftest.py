"""
Shared pytest fixtures for the DHCP HA manager tests.

Every test gets its own configuration document on disk, built from a
small appliance layout: four data interfaces with mixed addressing, a
WAN on DHCP, and a certificate section with server, client, dual-use
and plain certificates.
"""
import base64
import datetime
import json
import sys
from pathlib import Path
from typing import Dict, List

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID

# Ensure the repository root is importable when pytest runs from elsewhere
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dhcpha.dhcp.status import PeerHealth  # noqa: E402
from dhcpha.store import ConfigStore  # noqa: E402


def make_certificate(common_name: str, usages: List[x509.ObjectIdentifier]):
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.datetime.now(datetime.timezone.utc)
    builder = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=365))
    )
    if usages:
        builder = builder.add_extension(x509.ExtendedKeyUsage(usages), critical=False)
    certificate = builder.sign(key, hashes.SHA256())

    crt = certificate.public_bytes(serialization.Encoding.PEM)
    prv = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )
    return crt, prv


def cert_entry(refid: str, descr: str, usages) -> Dict[str, str]:
    crt, prv = make_certificate(descr, usages)
    return {
        'refid': refid,
        'descr': descr,
        'crt': base64.b64encode(crt).decode(),
        'prv': base64.b64encode(prv).decode(),
    }


@pytest.fixture(scope='session')
def certificates_section():
    return [
        cert_entry('srv1', 'Server cert', [ExtendedKeyUsageOID.SERVER_AUTH]),
        cert_entry('cli1', 'Client cert', [ExtendedKeyUsageOID.CLIENT_AUTH]),
        cert_entry('both1', 'Dual-use cert', [ExtendedKeyUsageOID.SERVER_AUTH, ExtendedKeyUsageOID.CLIENT_AUTH]),
        cert_entry('plain1', 'No EKU cert', []),
    ]


@pytest.fixture
def document(certificates_section):
    return {
        'system': {'hostname': 'fw1'},
        'interfaces': {
            'wan': {'descr': 'WAN', 'if': 'em0', 'ipaddr': 'dhcp', 'ipaddrv6': 'dhcp6'},
            'lan': {'descr': 'LAN', 'if': 'em1', 'ipaddr': '192.168.1.1', 'subnet': '24',
                    'ipaddrv6': 'track6'},
            'opt1': {'descr': 'DMZ', 'if': 'em2', 'ipaddr': '10.0.0.1', 'subnet': '24',
                     'ipaddrv6': '2001:db8:1::1', 'subnetv6': '64'},
            'opt2': {'descr': 'GUEST', 'if': 'em3', 'ipaddr': '10.0.1.1', 'subnet': '25'},
            'p2p': {'descr': 'LINK', 'if': 'em4', 'ipaddr': '172.16.0.1', 'subnet': '31',
                    'ipaddrv6': 'fe80::1', 'subnetv6': '64'},
        },
        'dhcpd': {
            'lan': {'enable': True, 'range': {'from': '192.168.1.100', 'to': '192.168.1.200'}},
            # Presence alone turns the flag on
            'opt1': {'enable': ''},
        },
        'dhcpdv6': {
            'opt1': {'enable': True},
        },
        'cert': certificates_section,
    }


@pytest.fixture
def config_file(tmp_path, document):
    path = tmp_path / 'config.json'
    path.write_text(json.dumps(document))
    return path


@pytest.fixture
def run_dir(tmp_path):
    return tmp_path / 'run'


@pytest.fixture
def store(config_file, run_dir):
    return ConfigStore(str(config_file), str(run_dir))


class FakeServices:
    """Records configure operations and answers with preset status codes."""

    def __init__(self, **results):
        self.calls = []
        self.results = {
            'dhcp': 0,
            'dns_registration': 0,
            'name_resolution': 0,
            'firewall': 0,
        }
        self.results.update(results)

    def configure_dhcp_daemon(self, family):
        self.calls.append(('dhcp', family.name))
        return self.results['dhcp']

    def configure_dns_registration_addon(self, family):
        self.calls.append(('dns_registration', family.name))
        return self.results['dns_registration']

    def configure_name_resolution_addon(self, family):
        self.calls.append(('name_resolution', family.name))
        return self.results['name_resolution']

    def recompile_firewall_rules(self):
        self.calls.append(('firewall', None))
        return self.results['firewall']

    def resync_zone_transfer_addon(self):
        self.calls.append(('zone_transfer', None))

    def called(self, name):
        return [call for call in self.calls if call[0] == name]


class FakeControl:
    """Stands in for the Kea control socket."""

    def __init__(self, peers=None):
        self.peers = peers if peers is not None else {
            'local': PeerHealth(in_touch=True, role='primary', state='hot-standby'),
            'remote': PeerHealth(age=20, in_touch=True, role='standby', state='hot-standby'),
        }
        self.queries = []

    def peer_health(self, family):
        self.queries.append(family.name)
        return self.peers


@pytest.fixture
def fake_services():
    return FakeServices()


@pytest.fixture
def fake_control():
    return FakeControl()


@pytest.fixture
def test_config(tmp_path, config_file, run_dir):
    from config import TestingConfig

    class LocalTestingConfig(TestingConfig):
        DHCPHA_CONFIG = str(config_file)
        DHCPHA_LOG_DIR = str(tmp_path / 'logs')
        DHCPHA_RUN_DIR = str(run_dir)
        KEA_CONFIG_DIR = str(tmp_path / 'kea')
        KEA_CERT_DIR = str(tmp_path / 'kea' / 'certs')
        KEA_SOCKET_DIR = str(tmp_path / 'kea')
        ZONE_TRANSFER_SUPPORT_FILE = str(tmp_path / 'bind.inc')

    return LocalTestingConfig


@pytest.fixture
def app(test_config, fake_services, fake_control):
    from dhcpha import create_app
    return create_app(test_config, services=fake_services, control=fake_control)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def ha_input():
    """Valid HA form input for the IPv4 family."""
    return {
        'ha_enable': 'yes',
        'ha_role': 'primary',
        'ha_localname': 'fw1',
        'ha_remotename': 'fw2',
        'ha_localip': '192.168.1.1',
        'ha_remoteip': '192.168.1.2',
        'interfaces': ['lan', 'opt1'],
    }
