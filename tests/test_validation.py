import pytest

from dhcpha.dhcp.certificates import CertificateDirectory
from dhcpha.dhcp.models import DhcpSettings, HASettings, MutualTls, Tls
from dhcpha.dhcp.validation import is_hostname_like, is_ip_address, is_port, validate


def settings(**ha_fields):
    return DhcpSettings(ha=HASettings(**ha_fields))


def test_disabled_and_empty_is_valid():
    assert validate(settings()) == []


def test_enabled_requires_remote_name_and_addresses_in_order():
    errors = validate(settings(enable=True))
    assert len(errors) == 3
    assert 'remote name' in errors[0]
    assert 'local address' in errors[1]
    assert 'remote address' in errors[2]


def test_complete_enabled_settings_are_valid():
    assert validate(settings(
        enable=True, role='primary', localname='fw1', remotename='fw2.example.org',
        localip='192.168.1.1', remoteip='2001:db8::2', localport='8765', remoteport='8766',
        heartbeatdelay='10000', maxunackedclients='0',
    )) == []


def test_all_violations_are_collected():
    errors = validate(settings(
        enable=True, localname='bad name', remotename='-fw2', localip='300.1.1.1',
        remoteip='fw2', localport='0', remoteport='http',
    ))
    assert len(errors) == 6
    assert '"bad name"' in errors[0]
    assert '"-fw2"' in errors[1]
    assert '"300.1.1.1"' in errors[2]
    assert '"fw2"' in errors[3]
    assert 'local port' in errors[4]
    assert 'remote port' in errors[5]


def test_optional_values_checked_even_when_disabled():
    errors = validate(settings(remotename='not valid', localip='nope'))
    assert len(errors) == 2


def test_role_and_tuning_values():
    errors = validate(settings(role='master', heartbeatdelay='10s', maxackdelay='-1'))
    assert len(errors) == 3
    assert 'role' in errors[0]
    assert errors[1].startswith('Heartbeat delay')
    assert errors[2].startswith('Maximum acknowledgement delay')


@pytest.mark.parametrize('value, expected', [
    ('fw1', True),
    ('fw-1.example.org', True),
    ('host_name', True),
    ('example.org.', True),
    ('-fw', False),
    ('fw-', False),
    ('a..b', False),
    ('with space', False),
    ('', False),
    ('a' * 64, False),
])
def test_is_hostname_like(value, expected):
    assert is_hostname_like(value) is expected


def test_is_ip_address():
    assert is_ip_address('10.0.0.1')
    assert is_ip_address('fe80::1')
    assert not is_ip_address('10.0.0.0/24')
    assert not is_ip_address('10.0.0')


def test_is_port():
    assert is_port('1')
    assert is_port('65535')
    assert not is_port('0')
    assert not is_port('65536')
    assert not is_port('+80')


def test_certificate_references(store):
    certificates = CertificateDirectory(store)

    assert validate(settings(tls=Tls('srv1')), certificates) == []
    assert validate(settings(tls=MutualTls('srv1', 'cli1')), certificates) == []

    errors = validate(settings(tls=Tls('cli1')), certificates)
    assert errors == ['TLS requires a valid server certificate.']

    errors = validate(settings(tls=MutualTls('both1', 'both1')), certificates)
    assert errors == ['Mutual TLS requires a valid client certificate.']

    errors = validate(settings(tls=MutualTls(None, None)), certificates)
    assert len(errors) == 2


def test_certificates_ignored_without_directory():
    assert validate(settings(tls=Tls(None))) == []


@pytest.mark.parametrize('value', ['²', '٣', '8765²'])
def test_non_ascii_digits_are_not_ports(value):
    assert not is_port(value)
    errors = validate(settings(localport=value))
    assert errors == [f'The local port "{value}" is not a valid port number.']


def test_non_ascii_digits_are_not_tuning_values():
    errors = validate(settings(heartbeatdelay='²', maxackdelay='1٠'))
    assert errors == [
        'Heartbeat delay must be a non-negative whole number.',
        'Maximum acknowledgement delay must be a non-negative whole number.',
    ]


def test_scoped_address_rejected():
    assert not is_ip_address('fe80::1%em0')
    assert len(validate(settings(localip='fe80::1%em0'))) == 1


def test_hostname_with_trailing_newline_rejected():
    assert not is_hostname_like('fw1\n')
