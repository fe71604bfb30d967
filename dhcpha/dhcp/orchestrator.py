"""
Apply orchestration for a DHCP family.

Runs the one configure operation that covers the DHCP daemon (through
a DNS add-on when one registers DHCP static mappings), resyncs the zone
transfer add-on when it depends on DHCP data, recompiles firewall rules,
and reduces everything to a single status code.
"""
import logging
import os

from dhcpha.dhcp.family import FamilyPolicy
from dhcpha.store import ConfigStore

logger = logging.getLogger('dhcpha')

DEFAULT_BACKEND = 'isc'
HOSTS_DIRTY_KEY = 'hosts'
# The name resolution add-on (DNS forwarder) keeps its own dirty flag
NAME_RESOLVER_DIRTY_KEY = 'dnsmasq'
ZONE_PACKAGE = 'bind'


class ApplyOrchestrator:
    """Apply pending DHCP changes for one family in dependency order."""

    def __init__(self, store: ConfigStore, family: FamilyPolicy, services, zone_support_file: str):
        self.store = store
        self.family = family
        self.services = services
        self.zone_support_file = zone_support_file

    def _dns_registration_active(self) -> bool:
        if not (self.store.path_enabled('unbound/enable')
                and self.store.path_enabled('unbound/regdhcpstatic')):
            return False
        backend_gate = self.family.registration_backend
        return backend_gate is None or self.store.get('dhcpbackend', DEFAULT_BACKEND) == backend_gate

    def _name_resolution_active(self) -> bool:
        return (self.store.path_enabled('dnsmasq/enable')
                and self.store.path_enabled('dnsmasq/regdhcpstatic'))

    def _zone_transfer_active(self) -> bool:
        packages = self.store.get('installedpackages/package', []) or []
        if not any(isinstance(p, dict) and p.get('name') == ZONE_PACKAGE for p in packages):
            return False
        if not self.store.path_enabled('installedpackages/bind/config/0/enable_bind'):
            return False
        zones = self.store.get('installedpackages/bindzone/config', []) or []
        if not any(isinstance(zone, dict) and zone.get('regdhcpstatic') not in (None, False)
                   for zone in zones):
            return False
        return os.path.exists(self.zone_support_file)

    def _run(self, step: str, operation, *args) -> int:
        """Run one subsystem operation; an exception counts as a failure."""
        try:
            return operation(*args)
        except Exception as e:
            logger.error(f"{step} failed for DHCP {self.family.name}: {str(e)}")
            return 1

    def apply_changes(self) -> int:
        """
        Apply pending changes.

        Returns:
            0 when the DHCP/DNS configure and the firewall reload both
            succeeded, 1 otherwise
        """
        dirty_key = self.family.dirty_key

        if self._dns_registration_active():
            logger.info(f"Applying DHCP {self.family.name} changes through the DNS resolver")
            configure_status = self._run('DNS resolver configure',
                                         self.services.configure_dns_registration_addon, self.family)
            if configure_status == 0:
                self.store.clear_dirty(HOSTS_DIRTY_KEY)
                self.store.clear_dirty(dirty_key)
        elif self._name_resolution_active():
            logger.info(f"Applying DHCP {self.family.name} changes through the name resolution add-on")
            configure_status = self._run('Name resolution configure',
                                         self.services.configure_name_resolution_addon, self.family)
            if configure_status == 0:
                self.store.clear_dirty(NAME_RESOLVER_DIRTY_KEY)
                self.store.clear_dirty(HOSTS_DIRTY_KEY)
                self.store.clear_dirty(dirty_key)
        else:
            logger.info(f"Applying DHCP {self.family.name} changes to the DHCP daemon")
            configure_status = self._run('DHCP daemon configure',
                                         self.services.configure_dhcp_daemon, self.family)
            if configure_status == 0:
                self.store.clear_dirty(dirty_key)

        if self._zone_transfer_active():
            # Fire and forget: not part of the aggregate status
            self._run('Zone transfer resync', self.services.resync_zone_transfer_addon)

        firewall_status = self._run('Firewall rule reload', self.services.recompile_firewall_rules)

        if configure_status or firewall_status:
            logger.error(
                f"Apply for DHCP {self.family.name} failed "
                f"(configure={configure_status}, firewall={firewall_status})"
            )
            return 1
        return 0
