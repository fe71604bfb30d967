import pytest

from dhcpha.dhcp.defaults import DefaultPolicy
from dhcpha.exceptions import UnknownDefaultKey


def test_fixed_values(store):
    defaults = DefaultPolicy(store, 'dhcpha')
    assert defaults.get('heartbeatdelay') == 10000
    assert defaults.get('listenport') == 8765
    assert defaults.get('maxackdelay') == 10000
    assert defaults.get('maxrejectedleaseupdates') == 10
    assert defaults.get('maxresponsedelay') == 60000
    assert defaults['maxunackedclients'] == 10


def test_name_follows_hostname(store):
    defaults = DefaultPolicy(store, 'dhcpha')
    assert defaults.get('name') == 'fw1'

    store.set('system/hostname', 'edge')
    assert defaults.get('name') == 'edge'


def test_name_falls_back_to_product(store):
    store.delete('system/hostname')
    assert DefaultPolicy(store, 'dhcpha').get('name') == 'dhcpha'


def test_unknown_key_fails_loudly(store):
    defaults = DefaultPolicy(store, 'dhcpha')
    with pytest.raises(UnknownDefaultKey) as excinfo:
        defaults.get('leasetime')
    assert isinstance(excinfo.value, KeyError)
    assert 'leasetime' in str(excinfo.value)
