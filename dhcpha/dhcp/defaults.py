"""
Default HA tuning values for the Kea HA hook.

Defaults are applied only when the daemon configuration is rendered;
the stored settings keep a blank field blank.
"""
from typing import Union

from dhcpha.exceptions import UnknownDefaultKey
from dhcpha.store import ConfigStore

HA_DEFAULTS = {
    'heartbeatdelay': 10000,
    'listenport': 8765,
    'maxackdelay': 10000,
    'maxrejectedleaseupdates': 10,
    'maxresponsedelay': 60000,
    'maxunackedclients': 10,
}

DEFAULT_KEYS = frozenset(HA_DEFAULTS) | {'name'}


class DefaultPolicy:
    """Closed lookup table of HA defaults; 'name' follows the system hostname."""

    def __init__(self, store: ConfigStore, product_name: str):
        self.store = store
        self.product_name = product_name

    def get(self, key: str) -> Union[int, str]:
        if key not in DEFAULT_KEYS:
            raise UnknownDefaultKey(key)
        if key == 'name':
            hostname = self.store.get('system/hostname')
            return str(hostname) if hostname else self.product_name
        return HA_DEFAULTS[key]

    __getitem__ = get
