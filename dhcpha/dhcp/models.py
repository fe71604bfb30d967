"""
Typed DHCP HA settings and their persisted encoding.

The configuration document stores boolean flags as presence-as-true
keys. That encoding is confined to decode_settings() and
encode_settings(); everything else works on the dataclasses below,
whose equality is the change-detection rule for the reconciler.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

TUNING_FIELDS = (
    'heartbeatdelay',
    'maxresponsedelay',
    'maxackdelay',
    'maxunackedclients',
    'maxrejectedleaseupdates',
)

TEXT_FIELDS = (
    'role',
    'localname',
    'remotename',
    'localip',
    'remoteip',
    'localport',
    'remoteport',
) + TUNING_FIELDS

TLS_KEYS = ('tls', 'scertref', 'mutualtls', 'ccertref')

ROLES = ('primary', 'secondary')


@dataclass(frozen=True)
class NoTls:
    pass


@dataclass(frozen=True)
class Tls:
    server_cert: Optional[str] = None


@dataclass(frozen=True)
class MutualTls:
    server_cert: Optional[str] = None
    client_cert: Optional[str] = None


TlsMode = Union[NoTls, Tls, MutualTls]


@dataclass(frozen=True)
class HASettings:
    enable: bool = False
    role: Optional[str] = None
    localname: Optional[str] = None
    remotename: Optional[str] = None
    localip: Optional[str] = None
    remoteip: Optional[str] = None
    localport: Optional[str] = None
    remoteport: Optional[str] = None
    tls: TlsMode = field(default_factory=NoTls)
    heartbeatdelay: Optional[str] = None
    maxresponsedelay: Optional[str] = None
    maxackdelay: Optional[str] = None
    maxunackedclients: Optional[str] = None
    maxrejectedleaseupdates: Optional[str] = None


@dataclass(frozen=True)
class DhcpSettings:
    hidedisabled: bool = False
    ha: HASettings = field(default_factory=HASettings)


def is_present(value: Any) -> bool:
    """Presence test shared by the decoder and the form input reader."""
    if value is None or value is False:
        return False
    return str(value).strip() != ''


def _flag(document: Dict[str, Any], key: str) -> bool:
    return key in document and document[key] is not None and document[key] is not False


def _text(document: Dict[str, Any], key: str) -> Optional[str]:
    value = document.get(key)
    if not is_present(value):
        return None
    return str(value).strip()


def decode_tls(document: Dict[str, Any]) -> TlsMode:
    if not _flag(document, 'tls'):
        return NoTls()
    if _flag(document, 'mutualtls'):
        return MutualTls(_text(document, 'scertref'), _text(document, 'ccertref'))
    return Tls(_text(document, 'scertref'))


def decode_settings(document: Optional[Dict[str, Any]]) -> DhcpSettings:
    """Build typed settings from a persisted snapshot (or None for an empty one)."""
    document = document or {}
    ha_doc = document.get('ha') or {}
    if not isinstance(ha_doc, dict):
        ha_doc = {}

    ha = HASettings(
        enable=_flag(ha_doc, 'enable'),
        tls=decode_tls(ha_doc),
        **{name: _text(ha_doc, name) for name in TEXT_FIELDS}
    )
    return DhcpSettings(hidedisabled=_flag(document, 'hidedisabled'), ha=ha)


def _encode_tls(tls: TlsMode, ha_doc: Dict[str, Any]) -> None:
    for key in TLS_KEYS:
        ha_doc.pop(key, None)

    if isinstance(tls, NoTls):
        return
    ha_doc['tls'] = True
    if tls.server_cert:
        ha_doc['scertref'] = tls.server_cert
    if isinstance(tls, MutualTls):
        ha_doc['mutualtls'] = True
        if tls.client_cert:
            ha_doc['ccertref'] = tls.client_cert


def encode_settings(settings: DhcpSettings, existing: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Produce the persisted form of settings.

    Keys the settings model does not own are carried over from the
    existing snapshot untouched; owned keys are set when true/present
    and removed otherwise.
    """
    document = dict(existing or {})
    if settings.hidedisabled:
        document['hidedisabled'] = True
    else:
        document.pop('hidedisabled', None)

    ha_doc = dict(document.get('ha') or {})
    ha = settings.ha
    if ha.enable:
        ha_doc['enable'] = True
    else:
        ha_doc.pop('enable', None)

    for name in TEXT_FIELDS:
        value = getattr(ha, name)
        if value is None:
            ha_doc.pop(name, None)
        else:
            ha_doc[name] = value

    _encode_tls(ha.tls, ha_doc)
    document['ha'] = ha_doc
    return document


def tls_fields(tls: TlsMode) -> Dict[str, Any]:
    """Flatten a TLS mode into the flag/reference fields used by API clients."""
    return {
        'tls': not isinstance(tls, NoTls),
        'scertref': getattr(tls, 'server_cert', None),
        'mutualtls': isinstance(tls, MutualTls),
        'ccertref': getattr(tls, 'client_cert', None),
    }
