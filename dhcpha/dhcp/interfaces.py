"""
Interface directory and DHCP subnet/prefix enumeration.
"""
import ipaddress
from dataclasses import dataclass, field
from typing import Any, Dict, Set

from dhcpha.dhcp.family import FamilyPolicy, V4, V6
from dhcpha.store import ConfigStore

TRACK6 = 'track6'


@dataclass
class SubnetList:
    # Insertion order follows interface enumeration order
    available: Dict[str, str] = field(default_factory=dict)
    enabled: Set[str] = field(default_factory=set)


class InterfaceDirectory:
    """Configured network interfaces from the 'interfaces' section."""

    def __init__(self, store: ConfigStore):
        self.store = store

    def list_configured(self) -> Dict[str, str]:
        """Map interface id to its description, in configuration order."""
        interfaces = self.store.get('interfaces', {})
        if not isinstance(interfaces, dict):
            return {}
        return {
            if_id: (conf or {}).get('descr') or if_id.upper()
            for if_id, conf in interfaces.items()
        }

    def get(self, if_id: str) -> Dict[str, Any]:
        conf = self.store.get(f'interfaces/{if_id}', {})
        return conf if isinstance(conf, dict) else {}


def _is_ipv4(value: Any) -> bool:
    try:
        ipaddress.IPv4Address(str(value))
        return True
    except ValueError:
        return False


def is_subnet_eligible(conf: Dict[str, Any]) -> bool:
    """Static IPv4 address with a subnet smaller than /31."""
    subnet = str(conf.get('subnet') or '').strip()
    if not _is_ipv4(conf.get('ipaddr')) or not (subnet.isascii() and subnet.isdigit()):
        return False
    return int(subnet) < 31


def is_prefix_eligible(conf: Dict[str, Any]) -> bool:
    """Delegated prefix tracking, or a static global IPv6 address."""
    value = str(conf.get('ipaddrv6') or '').strip()
    if value == TRACK6:
        return True
    try:
        address = ipaddress.IPv6Address(value)
    except ValueError:
        return False
    return not address.is_link_local


def build_interface_list(interfaces: InterfaceDirectory, store: ConfigStore,
                         family: FamilyPolicy) -> SubnetList:
    eligible = is_prefix_eligible if family.is_ipv6 else is_subnet_eligible
    result = SubnetList()

    for if_id, descr in interfaces.list_configured().items():
        if not eligible(interfaces.get(if_id)):
            continue
        result.available[if_id] = f"{descr} ({if_id})"
        if store.path_enabled(f'{family.interface_area}/{if_id}/enable'):
            result.enabled.add(if_id)

    return result


def build_subnet_list(interfaces: InterfaceDirectory, store: ConfigStore) -> SubnetList:
    """IPv4 interfaces that can serve DHCP, and those that do."""
    return build_interface_list(interfaces, store, V4)


def build_prefix_list(interfaces: InterfaceDirectory, store: ConfigStore) -> SubnetList:
    """IPv6 interfaces that can serve DHCPv6, and those that do."""
    return build_interface_list(interfaces, store, V6)
