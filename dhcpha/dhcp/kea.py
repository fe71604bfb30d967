"""
Kea DHCP daemon integration.

Renders the daemon configuration for a family (interfaces, subnets and
the HA hook with defaults applied) and talks to the running daemon over
its unix control socket for live HA status.
"""
import ipaddress
import json
import logging
import os
import socket
from typing import Any, Dict, List, Optional, Union

import psutil

from dhcpha.dhcp.defaults import DefaultPolicy
from dhcpha.dhcp.family import FamilyPolicy
from dhcpha.dhcp.interfaces import InterfaceDirectory, TRACK6, build_interface_list
from dhcpha.dhcp.models import DhcpSettings, MutualTls, NoTls, decode_settings
from dhcpha.dhcp.status import PeerHealth, peer_health_from_status
from dhcpha.exceptions import ControlSocketError
from dhcpha.store import ConfigStore

logger = logging.getLogger('dhcpha')

HA_HOOK = 'libdhcp_ha.so'
LEASE_CMDS_HOOK = 'libdhcp_lease_cmds.so'

# Our stored role -> Kea hot-standby role
KEA_ROLES = {
    'primary': 'primary',
    'secondary': 'standby',
}


def _int_or_default(value: Optional[str], default: Union[int, str]) -> int:
    return int(value) if value else int(default)


def _peer_url(scheme: str, address: str, port: int) -> str:
    host = f'[{address}]' if ':' in address else address
    return f'{scheme}://{host}:{port}/'


def render_ha_hook(settings: DhcpSettings, defaults: DefaultPolicy, hooks_dir: str,
                   cert_dir: str) -> Optional[Dict[str, Any]]:
    """Build the HA hook library entry, or None when HA is disabled."""
    ha = settings.ha
    if not ha.enable:
        return None

    local_role = KEA_ROLES.get(ha.role or 'primary', 'primary')
    remote_role = 'standby' if local_role == 'primary' else 'primary'
    scheme = 'http' if isinstance(ha.tls, NoTls) else 'https'
    this_name = ha.localname or str(defaults['name'])

    local_peer = {
        'name': this_name,
        'url': _peer_url(scheme, ha.localip, _int_or_default(ha.localport, defaults['listenport'])),
        'role': local_role,
        'auto-failover': True,
    }
    remote_peer = {
        'name': ha.remotename,
        'url': _peer_url(scheme, ha.remoteip, _int_or_default(ha.remoteport, defaults['listenport'])),
        'role': remote_role,
        'auto-failover': True,
    }

    parameters: Dict[str, Any] = {
        'this-server-name': this_name,
        'mode': 'hot-standby',
        'heartbeat-delay': _int_or_default(ha.heartbeatdelay, defaults['heartbeatdelay']),
        'max-response-delay': _int_or_default(ha.maxresponsedelay, defaults['maxresponsedelay']),
        'max-ack-delay': _int_or_default(ha.maxackdelay, defaults['maxackdelay']),
        'max-unacked-clients': _int_or_default(ha.maxunackedclients, defaults['maxunackedclients']),
        'max-rejected-lease-updates': _int_or_default(ha.maxrejectedleaseupdates,
                                                      defaults['maxrejectedleaseupdates']),
        'multi-threading': {
            'enable-multi-threading': True,
            'http-dedicated-listener': True,
            'http-listener-threads': 0,
            'http-client-threads': 0,
        },
        'peers': [local_peer, remote_peer],
    }

    if not isinstance(ha.tls, NoTls):
        parameters['trust-anchor'] = cert_dir
        parameters['cert-file'] = os.path.join(cert_dir, f'{ha.tls.server_cert}.crt')
        parameters['key-file'] = os.path.join(cert_dir, f'{ha.tls.server_cert}.key')
        parameters['require-client-certs'] = isinstance(ha.tls, MutualTls)
        if isinstance(ha.tls, MutualTls):
            remote_peer['cert-file'] = os.path.join(cert_dir, f'{ha.tls.client_cert}.crt')
            remote_peer['key-file'] = os.path.join(cert_dir, f'{ha.tls.client_cert}.key')

    return {
        'library': os.path.join(hooks_dir, HA_HOOK),
        'parameters': {'high-availability': [parameters]},
    }


def _render_subnet(store: ConfigStore, family: FamilyPolicy, if_id: str,
                   conf: Dict[str, Any], subnet_id: int) -> Optional[Dict[str, Any]]:
    if family.is_ipv6:
        if conf.get('ipaddrv6') == TRACK6:
            # Delegated prefix is only known at runtime
            logger.info(f"Skipping DHCPv6 subnet for {if_id}: prefix is delegated")
            return None
        network = ipaddress.ip_interface(f"{conf['ipaddrv6']}/{conf.get('subnetv6', 64)}").network
    else:
        network = ipaddress.ip_interface(f"{conf['ipaddr']}/{conf['subnet']}").network

    subnet: Dict[str, Any] = {
        'id': subnet_id,
        'subnet': str(network),
        'interface': conf.get('if', if_id),
    }
    range_from = store.get(f'{family.interface_area}/{if_id}/range/from')
    range_to = store.get(f'{family.interface_area}/{if_id}/range/to')
    if range_from and range_to:
        subnet['pools'] = [{'pool': f'{range_from} - {range_to}'}]
    return subnet


def render_daemon_config(store: ConfigStore, interfaces: InterfaceDirectory, family: FamilyPolicy,
                         defaults: DefaultPolicy, hooks_dir: str, socket_dir: str,
                         cert_dir: str) -> Dict[str, Any]:
    """Render the complete Kea configuration document for one family."""
    settings = decode_settings(store.get(family.settings_key, {}))
    enabled = build_interface_list(interfaces, store, family).enabled

    if_names: List[str] = []
    subnets: List[Dict[str, Any]] = []
    for if_id in interfaces.list_configured():
        if if_id not in enabled:
            continue
        conf = interfaces.get(if_id)
        if_names.append(conf.get('if', if_id))
        subnet = _render_subnet(store, family, if_id, conf, len(subnets) + 1)
        if subnet:
            subnets.append(subnet)

    hooks: List[Dict[str, Any]] = []
    ha_hook = render_ha_hook(settings, defaults, hooks_dir, cert_dir)
    if ha_hook:
        hooks.append({'library': os.path.join(hooks_dir, LEASE_CMDS_HOOK)})
        hooks.append(ha_hook)

    subnet_key = 'subnet6' if family.is_ipv6 else 'subnet4'
    return {
        family.kea_section: {
            'interfaces-config': {'interfaces': if_names},
            'control-socket': {
                'socket-type': 'unix',
                'socket-name': os.path.join(socket_dir, family.socket_name),
            },
            'lease-database': {'type': 'memfile', 'persist': True},
            subnet_key: subnets,
            'hooks-libraries': hooks,
        }
    }


class KeaControl:
    """Client for the Kea daemons' unix control sockets."""

    def __init__(self, socket_dir: str, timeout: float = 5.0):
        self.socket_dir = socket_dir
        self.timeout = timeout

    def send_command(self, family: FamilyPolicy, command: str,
                     arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        socket_path = os.path.join(self.socket_dir, family.socket_name)
        request = {'command': command}
        if arguments:
            request['arguments'] = arguments

        try:
            with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as s:
                s.settimeout(self.timeout)
                s.connect(socket_path)
                s.sendall(json.dumps(request).encode())
                chunks = []
                while True:
                    chunk = s.recv(65536)
                    if not chunk:
                        break
                    chunks.append(chunk)
        except OSError as e:
            raise ControlSocketError(socket_path, str(e))

        try:
            response = json.loads(b''.join(chunks).decode())
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ControlSocketError(socket_path, f"invalid response: {str(e)}")

        # Some commands answer with a one-element list
        if isinstance(response, list):
            response = response[0] if response else {}
        if response.get('result', 1) != 0:
            raise ControlSocketError(socket_path, response.get('text', 'command failed'))
        return response

    def peer_health(self, family: FamilyPolicy) -> Dict[str, PeerHealth]:
        """Fresh local/remote peer records from 'status-get'."""
        return peer_health_from_status(self.send_command(family, 'status-get'))


def daemon_running(process_name: str) -> bool:
    """True if a process with the given name is alive."""
    for proc in psutil.process_iter(['name']):
        try:
            if proc.info['name'] == process_name:
                return True
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue
    return False
