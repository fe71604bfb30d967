"""
Settings reconciliation for DHCP HA.

Takes raw operator input, builds the proposed settings, validates them,
compares them to what is stored, applies the interface enable/disable
delta, persists the result and flags the DHCP subsystem for a deferred
apply. Nothing is written when validation fails or nothing changed.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional, Set

from dhcpha.dhcp.family import FamilyPolicy
from dhcpha.dhcp.interfaces import InterfaceDirectory, build_interface_list
from dhcpha.dhcp.models import (
    DhcpSettings,
    HASettings,
    MutualTls,
    NoTls,
    TEXT_FIELDS,
    Tls,
    TlsMode,
    decode_settings,
    encode_settings,
    is_present,
)
from dhcpha.dhcp.validation import validate
from dhcpha.store import ConfigStore

logger = logging.getLogger('dhcpha')

INTERFACES_KEY = 'interfaces'
_FALSE_STRINGS = {'false', 'off', 'no'}


@dataclass
class ReconcileResult:
    errors: List[str]
    settings: DhcpSettings
    changed: bool = False
    need_sync: bool = False
    enabled_interfaces: List[str] = field(default_factory=list)
    disabled_interfaces: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def _raw_text(raw: Mapping[str, Any], key: str) -> Optional[str]:
    value = raw.get(key)
    return str(value).strip() if is_present(value) else None


def _raw_flag(raw: Mapping[str, Any], key: str) -> bool:
    value = raw.get(key)
    if value is True:
        return True
    return is_present(value) and str(value).strip().lower() not in _FALSE_STRINGS


def _raw_tls(raw: Mapping[str, Any]) -> TlsMode:
    # Without TLS the certificate and mutual TLS fields are dropped, whatever was sent
    if not _raw_flag(raw, 'ha_tls'):
        return NoTls()
    server_cert = _raw_text(raw, 'ha_scertref')
    if _raw_flag(raw, 'ha_mutualtls'):
        return MutualTls(server_cert, _raw_text(raw, 'ha_ccertref'))
    return Tls(server_cert)


def settings_from_input(raw: Mapping[str, Any]) -> DhcpSettings:
    """
    Build settings from submitted fields.

    Each field is taken when present and dropped otherwise; nothing is
    merged from the stored snapshot and no defaults are filled in.
    """
    ha = HASettings(
        enable=_raw_flag(raw, 'ha_enable'),
        tls=_raw_tls(raw),
        **{name: _raw_text(raw, f'ha_{name}') for name in TEXT_FIELDS}
    )
    return DhcpSettings(hidedisabled=_raw_flag(raw, 'hidedisabled'), ha=ha)


def selected_interfaces(raw: Mapping[str, Any]) -> List[str]:
    """Interface ids selected in the input; no selection sent means none selected."""
    if INTERFACES_KEY not in raw:
        return []
    if hasattr(raw, 'getlist'):
        values = raw.getlist(INTERFACES_KEY)
    else:
        values = raw[INTERFACES_KEY]
    if values is None:
        return []
    if isinstance(values, str):
        values = [values]

    selection: List[str] = []
    for value in values:
        value = str(value).strip()
        if value and value not in selection:
            selection.append(value)
    return selection


class SettingsReconciler:
    """Reconcile one DHCP family's HA settings with the configuration store."""

    def __init__(self, store: ConfigStore, family: FamilyPolicy,
                 interfaces: InterfaceDirectory, certificates=None):
        self.store = store
        self.family = family
        self.interfaces = interfaces
        self.certificates = certificates

    def reconcile(self, current_enabled: Iterable[str], raw_input: Mapping[str, Any]) -> ReconcileResult:
        """
        Validate and persist submitted settings.

        Args:
            current_enabled: Interface ids that currently serve DHCP
            raw_input: Submitted fields; 'interfaces' holds the selection, and
                an absent key selects no interface

        Returns:
            ReconcileResult; on validation errors nothing has been written
        """
        existing = self.store.get(self.family.settings_key, {}) or {}
        baseline = decode_settings(existing)
        proposed = settings_from_input(raw_input)

        errors = validate(proposed, self.certificates)
        if errors:
            logger.info(f"DHCP {self.family.name} HA settings rejected: {len(errors)} validation error(s)")
            return ReconcileResult(errors=errors, settings=proposed)

        changed = proposed != baseline
        need_sync = False

        to_enable, to_disable = self._interface_delta(set(current_enabled), selected_interfaces(raw_input))
        for if_id in to_enable:
            self.store.set(f'{self.family.interface_area}/{if_id}/enable', True)
        for if_id in to_disable:
            self.store.delete(f'{self.family.interface_area}/{if_id}/enable')
        if to_enable or to_disable:
            changed = True
            need_sync = True

        if not changed:
            logger.debug(f"DHCP {self.family.name} HA settings unchanged")
            return ReconcileResult(errors=[], settings=proposed)

        self.store.set(self.family.settings_key, encode_settings(proposed, existing))
        self.store.write(self._change_description(to_enable, to_disable))

        if need_sync or proposed.ha != baseline.ha:
            self.store.mark_dirty(self.family.dirty_key)

        logger.info(
            f"DHCP {self.family.name} HA settings saved "
            f"(enabled={to_enable}, disabled={to_disable}, need_sync={need_sync})"
        )
        return ReconcileResult(
            errors=[],
            settings=proposed,
            changed=True,
            need_sync=need_sync,
            enabled_interfaces=to_enable,
            disabled_interfaces=to_disable,
        )

    def _interface_delta(self, current: Set[str], selection: List[str]):
        available = build_interface_list(self.interfaces, self.store, self.family).available
        unknown = [if_id for if_id in selection if if_id not in available]
        if unknown:
            logger.warning(f"Ignoring selection of ineligible interfaces: {', '.join(unknown)}")

        to_enable = [if_id for if_id in selection if if_id in available and if_id not in current]
        # Interface enumeration order, then any no longer listed ids by name
        ordered = [if_id for if_id in available if if_id in current]
        ordered += sorted(current.difference(available))
        to_disable = [if_id for if_id in ordered if if_id not in selection]
        return to_enable, to_disable

    def _change_description(self, to_enable: List[str], to_disable: List[str]) -> str:
        service = 'DHCPv6' if self.family.is_ipv6 else 'DHCP'
        description = f"{service} server: high availability settings changed"
        if to_enable:
            description += f"; enabled on {', '.join(to_enable)}"
        if to_disable:
            description += f"; disabled on {', '.join(to_disable)}"
        return description
