"""
Subsystem configure operations.

Each operation returns 0 on success and 1 on failure; failures are
logged, not raised, so the apply orchestrator can carry on with the
remaining subsystems.
"""
import logging
import os
from typing import Any, List, Mapping

from dhcpha.dhcp.certificates import CertificateDirectory
from dhcpha.dhcp.defaults import DefaultPolicy
from dhcpha.dhcp.family import FamilyPolicy
from dhcpha.dhcp.interfaces import InterfaceDirectory, build_interface_list
from dhcpha.dhcp.kea import render_daemon_config
from dhcpha.dhcp.models import NoTls, MutualTls, decode_settings
from dhcpha.store import ConfigStore
from dhcpha.utils.utils import atomic_write_json, execute_command, execute_systemctl_command

logger = logging.getLogger('dhcpha')


def _status(success: bool) -> int:
    return 0 if success else 1


class SystemServices:
    """Configure operations backed by the Kea daemons and helper commands."""

    def __init__(self, store: ConfigStore, interfaces: InterfaceDirectory,
                 certificates: CertificateDirectory, defaults: DefaultPolicy,
                 settings: Mapping[str, Any]):
        self.store = store
        self.interfaces = interfaces
        self.certificates = certificates
        self.defaults = defaults
        self.kea_config_dir = settings['KEA_CONFIG_DIR']
        self.kea_cert_dir = settings['KEA_CERT_DIR']
        self.kea_hooks_dir = settings['KEA_HOOKS_DIR']
        self.kea_socket_dir = settings['KEA_SOCKET_DIR']
        self.dns_resolver_command: List[str] = list(settings['DNS_RESOLVER_CONFIGURE_COMMAND'])
        self.dns_forwarder_command: List[str] = list(settings['DNS_FORWARDER_CONFIGURE_COMMAND'])
        self.firewall_command: List[str] = list(settings['FIREWALL_RELOAD_COMMAND'])
        self.zone_transfer_command: List[str] = list(settings['ZONE_TRANSFER_RESYNC_COMMAND'])

    def _write_certificates(self, family: FamilyPolicy) -> None:
        tls = decode_settings(self.store.get(family.settings_key, {})).ha.tls
        if isinstance(tls, NoTls):
            return

        refs = [tls.server_cert]
        if isinstance(tls, MutualTls):
            refs.append(tls.client_cert)

        os.makedirs(self.kea_cert_dir, mode=0o700, exist_ok=True)
        for ref in refs:
            crt, key = self.certificates.get_pem_pair(ref)
            if crt is None or key is None:
                raise ValueError(f"certificate {ref} is missing its certificate or key")
            with open(os.path.join(self.kea_cert_dir, f'{ref}.crt'), 'wb') as f:
                f.write(crt)
            key_path = os.path.join(self.kea_cert_dir, f'{ref}.key')
            with open(os.open(key_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600), 'wb') as f:
                f.write(key)

    def configure_dhcp_daemon(self, family: FamilyPolicy) -> int:
        """Render and install the family's Kea configuration, then (re)start or stop the daemon."""
        try:
            document = render_daemon_config(
                self.store, self.interfaces, family, self.defaults,
                self.kea_hooks_dir, self.kea_socket_dir, self.kea_cert_dir,
            )
            self._write_certificates(family)
            config_path = os.path.join(self.kea_config_dir, f'{family.daemon_service}.conf')
            atomic_write_json(config_path, document)
        except Exception as e:
            logger.error(f"Failed to render {family.daemon_service} configuration: {str(e)}")
            return 1

        if not build_interface_list(self.interfaces, self.store, family).enabled:
            logger.info(f"No interfaces enabled for {family.daemon_service}, stopping service")
            success, _ = execute_systemctl_command('stop', family.daemon_service)
            return _status(success)

        success, output = execute_systemctl_command('restart', family.daemon_service)
        if not success:
            logger.error(f"Failed to restart {family.daemon_service}: {output}")
        return _status(success)

    def _run_then_configure_daemon(self, command: List[str], family: FamilyPolicy) -> int:
        success, _, stderr = execute_command(command + [family.name])
        if not success:
            logger.error(f"{command[-1]} failed: {stderr}")
        # The DNS add-ons pull DHCP static mappings, so the daemon is reconfigured with them
        daemon_status = self.configure_dhcp_daemon(family)
        return 1 if not success or daemon_status else 0

    def configure_dns_registration_addon(self, family: FamilyPolicy) -> int:
        return self._run_then_configure_daemon(self.dns_resolver_command, family)

    def configure_name_resolution_addon(self, family: FamilyPolicy) -> int:
        return self._run_then_configure_daemon(self.dns_forwarder_command, family)

    def recompile_firewall_rules(self) -> int:
        success, _, stderr = execute_command(self.firewall_command)
        if not success:
            logger.error(f"Firewall rule reload failed: {stderr}")
        return _status(success)

    def resync_zone_transfer_addon(self) -> None:
        success, _, stderr = execute_command(self.zone_transfer_command)
        if not success:
            logger.warning(f"Zone transfer resync failed: {stderr}")
