"""
DHCP HA API endpoints.

Settings, apply and live status for the IPv4 ('v4') and IPv6 ('v6')
DHCP services. Rendering is left to the frontend; everything here is JSON.
"""
from typing import Any, Dict

from flask import current_app, jsonify, request

from . import bp
from .family import FAMILIES, get_family
from .formatting import NOT_APPLICABLE, format_age
from .kea import daemon_running
from .models import DhcpSettings, TEXT_FIELDS, decode_settings, tls_fields
from .status import LOCAL, REMOTE, classify
from dhcpha.exceptions import ConfigStoreError, ControlSocketError
from dhcpha.utils.utils import error_response, success_response, write_to_log


def _manager():
    return current_app.extensions['dhcpha']


@bp.before_request
def validate_family_and_reload():
    """Reject unknown families and read the configuration fresh for every request."""
    family = (request.view_args or {}).get('family')
    if family is not None and family not in FAMILIES:
        return error_response(f"Unknown DHCP family: {family}", 404)
    try:
        _manager().store.load()
    except ConfigStoreError as e:
        current_app.logger.error(f"Error loading configuration: {str(e)}")
        return error_response('Configuration could not be loaded', 500)
    return None


def _settings_payload(settings: DhcpSettings) -> Dict[str, Any]:
    ha = {'enable': settings.ha.enable}
    ha.update({name: getattr(settings.ha, name) for name in TEXT_FIELDS})
    ha.update(tls_fields(settings.ha.tls))
    return {'hidedisabled': settings.hidedisabled, 'ha': ha}


def _raw_input():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else request.form


@bp.route('/<family>/ha', methods=['GET'])
def get_ha_settings(family):
    """Current HA settings, eligible interfaces and certificates for a family."""
    try:
        manager = _manager()
        policy = get_family(family)
        settings = decode_settings(manager.store.get(policy.settings_key, {}))
        interface_list = manager.interface_list(policy)

        return jsonify({
            'success': True,
            'settings': _settings_payload(settings),
            'interfaces': {
                'available': interface_list.available,
                'enabled': [i for i in interface_list.available if i in interface_list.enabled],
            },
            'certificates': {
                'server': {ref: meta['descr'] for ref, meta in manager.certificates.server_certificates().items()},
                'client': {ref: meta['descr'] for ref, meta in manager.certificates.client_certificates().items()},
            },
            'dirty': manager.store.is_dirty(policy.dirty_key),
        })
    except Exception as e:
        current_app.logger.error(f"Error getting DHCP {family} HA settings: {str(e)}")
        return jsonify({
            'success': False,
            'error': str(e)
        }), 500


@bp.route('/<family>/ha', methods=['POST'])
def save_ha_settings(family):
    """Validate and store submitted HA settings; the change is applied later."""
    try:
        manager = _manager()
        policy = get_family(family)
        current_enabled = manager.interface_list(policy).enabled
        result = manager.reconciler(policy).reconcile(current_enabled, _raw_input())

        if not result.ok:
            return error_response('Validation failed', 400, {
                'errors': result.errors,
                'settings': _settings_payload(result.settings),
            })

        if result.changed:
            write_to_log('dhcp', f'DHCP {family} HA settings saved', 'info')
            message = 'Settings saved; apply changes to activate them'
        else:
            message = 'No changes'

        return success_response(message, {
            'changed': result.changed,
            'needSync': result.need_sync,
            'dirty': manager.store.is_dirty(policy.dirty_key),
            'enabledInterfaces': result.enabled_interfaces,
            'disabledInterfaces': result.disabled_interfaces,
        })
    except ConfigStoreError as e:
        current_app.logger.error(f"Error saving DHCP {family} HA settings: {str(e)}")
        return error_response('Configuration could not be written', 500)
    except Exception as e:
        current_app.logger.error(f"Error saving DHCP {family} HA settings: {str(e)}")
        return error_response('Internal server error', 500)


@bp.route('/<family>/ha/apply', methods=['POST'])
def apply_ha_changes(family):
    """Push pending DHCP changes to the daemon and dependent subsystems."""
    try:
        manager = _manager()
        policy = get_family(family)
        status = manager.orchestrator(policy).apply_changes()

        if status != 0:
            write_to_log('dhcp', f'Applying DHCP {family} changes failed', 'error')
            return error_response('One or more services failed to apply the changes', 500, {
                'dirty': manager.store.is_dirty(policy.dirty_key),
            })

        write_to_log('dhcp', f'DHCP {family} changes applied', 'info')
        return success_response('Changes applied', {'dirty': manager.store.is_dirty(policy.dirty_key)})
    except Exception as e:
        current_app.logger.error(f"Error applying DHCP {family} changes: {str(e)}")
        return error_response('Internal server error', 500)


@bp.route('/<family>/ha/status', methods=['GET'])
def get_ha_status(family):
    """Daemon liveness and classified HA peer status."""
    try:
        manager = _manager()
        policy = get_family(family)
        settings = decode_settings(manager.store.get(policy.settings_key, {}))
        running = daemon_running(policy.daemon_service)

        response = {
            'success': True,
            'running': running,
            'haEnabled': settings.ha.enable,
            'peers': {},
        }
        if not (running and settings.ha.enable):
            return jsonify(response)

        try:
            peers = manager.control.peer_health(policy)
        except ControlSocketError as e:
            current_app.logger.warning(f"HA status unavailable for DHCP {family}: {str(e)}")
            response['error'] = 'HA status unavailable'
            return jsonify(response)

        heartbeat_delay = int(settings.ha.heartbeatdelay or manager.defaults['heartbeatdelay'])
        for scope in (LOCAL, REMOTE):
            peer = peers.get(scope)
            if peer is None:
                continue
            status = classify(scope, peer, heartbeat_delay)
            response['peers'][scope] = {
                'status': status.label,
                'severity': status.severity,
                'age': NOT_APPLICABLE if scope == LOCAL else format_age(peer.age),
                'role': peer.role,
                'state': peer.state,
            }
        return jsonify(response)
    except Exception as e:
        current_app.logger.error(f"Error getting DHCP {family} HA status: {str(e)}")
        return jsonify({
            'success': False,
            'error': str(e)
        }), 500
