"""
Wiring of the DHCP HA collaborators for one application instance.
"""
from typing import Any, Mapping, Optional

from dhcpha.dhcp.certificates import CertificateDirectory
from dhcpha.dhcp.defaults import DefaultPolicy
from dhcpha.dhcp.family import FamilyPolicy
from dhcpha.dhcp.interfaces import InterfaceDirectory, SubnetList, build_interface_list
from dhcpha.dhcp.kea import KeaControl
from dhcpha.dhcp.orchestrator import ApplyOrchestrator
from dhcpha.dhcp.reconciler import SettingsReconciler
from dhcpha.dhcp.services import SystemServices
from dhcpha.store import ConfigStore


class DhcpHaManager:
    """Holds the configuration store handle and everything built on it."""

    def __init__(self, settings: Mapping[str, Any], services=None, control: Optional[KeaControl] = None):
        self.store = ConfigStore(settings['DHCPHA_CONFIG'], settings['DHCPHA_RUN_DIR'])
        self.interfaces = InterfaceDirectory(self.store)
        self.certificates = CertificateDirectory(self.store)
        self.defaults = DefaultPolicy(self.store, settings['PRODUCT_NAME'])
        self.services = services or SystemServices(
            self.store, self.interfaces, self.certificates, self.defaults, settings
        )
        self.control = control or KeaControl(settings['KEA_SOCKET_DIR'])
        self.zone_support_file = settings['ZONE_TRANSFER_SUPPORT_FILE']

    def interface_list(self, family: FamilyPolicy) -> SubnetList:
        return build_interface_list(self.interfaces, self.store, family)

    def reconciler(self, family: FamilyPolicy) -> SettingsReconciler:
        return SettingsReconciler(self.store, family, self.interfaces, self.certificates)

    def orchestrator(self, family: FamilyPolicy) -> ApplyOrchestrator:
        return ApplyOrchestrator(self.store, family, self.services, self.zone_support_file)
