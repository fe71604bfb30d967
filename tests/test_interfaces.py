from dhcpha.dhcp.family import V4, V6
from dhcpha.dhcp.interfaces import (
    InterfaceDirectory,
    build_interface_list,
    build_prefix_list,
    build_subnet_list,
    is_prefix_eligible,
    is_subnet_eligible,
)


def test_list_configured_keeps_order_and_falls_back_to_id(store):
    store.set('interfaces/opt9', {'if': 'em9'})
    directory = InterfaceDirectory(store)
    assert list(directory.list_configured().items()) == [
        ('wan', 'WAN'), ('lan', 'LAN'), ('opt1', 'DMZ'), ('opt2', 'GUEST'), ('p2p', 'LINK'), ('opt9', 'OPT9'),
    ]
    assert directory.get('lan')['ipaddr'] == '192.168.1.1'
    assert directory.get('missing') == {}


def test_subnet_list(store):
    subnets = build_subnet_list(InterfaceDirectory(store), store)
    assert list(subnets.available.items()) == [
        ('lan', 'LAN (lan)'), ('opt1', 'DMZ (opt1)'), ('opt2', 'GUEST (opt2)'),
    ]
    assert subnets.enabled == {'lan', 'opt1'}


def test_prefix_list(store):
    prefixes = build_prefix_list(InterfaceDirectory(store), store)
    assert list(prefixes.available) == ['lan', 'opt1']
    assert prefixes.enabled == {'opt1'}


def test_enabled_requires_eligibility(store):
    store.set('dhcpd/p2p/enable', True)
    store.set('dhcpd/wan/enable', True)
    subnets = build_interface_list(InterfaceDirectory(store), store, V4)
    assert 'p2p' not in subnets.enabled
    assert 'wan' not in subnets.enabled


def test_false_flag_is_disabled(store):
    store.set('dhcpdv6/opt1/enable', False)
    assert build_interface_list(InterfaceDirectory(store), store, V6).enabled == set()


def test_subnet_eligibility():
    assert is_subnet_eligible({'ipaddr': '10.0.0.1', 'subnet': '30'})
    assert not is_subnet_eligible({'ipaddr': '10.0.0.1', 'subnet': '31'})
    assert not is_subnet_eligible({'ipaddr': '10.0.0.1', 'subnet': ''})
    assert not is_subnet_eligible({'ipaddr': 'dhcp', 'subnet': '24'})
    assert not is_subnet_eligible({})


def test_prefix_eligibility():
    assert is_prefix_eligible({'ipaddrv6': 'track6'})
    assert is_prefix_eligible({'ipaddrv6': '2001:db8::1'})
    assert not is_prefix_eligible({'ipaddrv6': 'fe80::1'})
    assert not is_prefix_eligible({'ipaddrv6': 'slaac'})
    assert not is_prefix_eligible({})
