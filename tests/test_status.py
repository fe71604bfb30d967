import pytest

from dhcpha.dhcp.status import HAStatus, PeerHealth, classify, peer_health_from_status


def test_local_is_always_online():
    offline_looking = PeerHealth(age=9999, in_touch=False, communication_interrupted=True)
    assert classify('local', offline_looking, 10000) is HAStatus.ONLINE
    assert classify('local', None, 0) is HAStatus.ONLINE


def test_remote_within_threshold_is_online():
    peer = PeerHealth(age=5, in_touch=True, communication_interrupted=False)
    assert classify('remote', peer, 10000) is HAStatus.ONLINE


def test_remote_beyond_threshold_is_interrupted():
    peer = PeerHealth(age=20, in_touch=True, communication_interrupted=False)
    assert classify('remote', peer, 10000) is HAStatus.INTERRUPTED


def test_threshold_includes_grace_period_and_is_inclusive():
    assert classify('remote', PeerHealth(age=11.9, in_touch=True), 10000) is HAStatus.ONLINE
    assert classify('remote', PeerHealth(age=12, in_touch=True), 10000) is HAStatus.INTERRUPTED


def test_not_in_touch_is_offline_despite_low_age():
    peer = PeerHealth(age=1, in_touch=False, communication_interrupted=False)
    assert classify('remote', peer, 10000) is HAStatus.OFFLINE


def test_communication_interrupted_overrides_interrupted():
    peer = PeerHealth(age=60, in_touch=True, communication_interrupted=True)
    assert classify('remote', peer, 10000) is HAStatus.OFFLINE


def test_status_label_and_severity_order():
    assert HAStatus.ONLINE.value == ('Online', 0)
    assert HAStatus.INTERRUPTED.label == 'Interrupted'
    assert HAStatus.ONLINE.severity < HAStatus.INTERRUPTED.severity < HAStatus.OFFLINE.severity


def test_unknown_scope_rejected():
    with pytest.raises(ValueError):
        classify('peer', PeerHealth(), 10000)


def test_peer_health_from_status_get():
    response = {
        'result': 0,
        'arguments': {
            'pid': 1234,
            'high-availability': [{
                'ha-mode': 'hot-standby',
                'ha-servers': {
                    'local': {'role': 'primary', 'state': 'hot-standby'},
                    'remote': {
                        'age': 7,
                        'in-touch': True,
                        'communication-interrupted': False,
                        'role': 'standby',
                        'last-state': 'hot-standby',
                    },
                },
            }],
        },
    }
    peers = peer_health_from_status(response)
    assert peers['local'].role == 'primary'
    assert peers['remote'] == PeerHealth(age=7, in_touch=True, communication_interrupted=False,
                                         role='standby', state='hot-standby')


def test_peer_health_without_ha_hook():
    assert peer_health_from_status({'result': 0, 'arguments': {'pid': 1}}) == {}
