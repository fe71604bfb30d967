"""
Per-family policy records.

The IPv4 and IPv6 DHCP services share one reconciler and one apply
orchestrator; everything that differs between them lives here.
"""
from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class FamilyPolicy:
    name: str
    # Settings snapshot location in the configuration document
    settings_key: str
    # Per-interface DHCP configuration area
    interface_area: str
    dirty_key: str
    daemon_service: str
    kea_section: str
    socket_name: str
    # DNS resolver registration only runs on this DHCP backend; None means no gate
    registration_backend: Optional[str] = None

    @property
    def is_ipv6(self) -> bool:
        return self.name == 'v6'


V4 = FamilyPolicy(
    name='v4',
    settings_key='kea',
    interface_area='dhcpd',
    dirty_key='dhcpd',
    daemon_service='kea-dhcp4',
    kea_section='Dhcp4',
    socket_name='kea-dhcp4.sock',
    registration_backend='isc',
)

V6 = FamilyPolicy(
    name='v6',
    settings_key='kea6',
    interface_area='dhcpdv6',
    dirty_key='dhcpd6',
    daemon_service='kea-dhcp6',
    kea_section='Dhcp6',
    socket_name='kea-dhcp6.sock',
)

FAMILIES: Dict[str, FamilyPolicy] = {
    V4.name: V4,
    V6.name: V6,
}


def get_family(name: str) -> FamilyPolicy:
    """Look up a family policy by its short name ('v4' or 'v6')."""
    try:
        return FAMILIES[name]
    except KeyError:
        raise KeyError(f"Unknown DHCP family: {name}")
