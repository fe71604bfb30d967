"""
HA peer health classification.

Peer health comes from a live status query to the running DHCP daemon
and is never cached. The classifier turns it into one of three states
that only ever escalate: Online, Interrupted, Offline.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

GRACE_SECONDS = 2

LOCAL = 'local'
REMOTE = 'remote'


class HAStatus(Enum):
    """Peer status; the value is the (label, severity) pair."""
    ONLINE = ('Online', 0)
    INTERRUPTED = ('Interrupted', 1)
    OFFLINE = ('Offline', 2)

    @property
    def label(self) -> str:
        return self.value[0]

    @property
    def severity(self) -> int:
        return self.value[1]


@dataclass(frozen=True)
class PeerHealth:
    age: Optional[float] = None
    in_touch: bool = False
    communication_interrupted: bool = False
    role: Optional[str] = None
    state: Optional[str] = None


def _escalate(current: HAStatus, candidate: HAStatus) -> HAStatus:
    return candidate if candidate.severity > current.severity else current


def classify(scope: str, peer: Optional[PeerHealth], heartbeat_delay_ms: int) -> HAStatus:
    """
    Classify a peer for display.

    The local server is always Online. For the remote peer the heartbeat
    threshold is heartbeat_delay_ms in seconds plus a two second grace
    period; an age at or beyond it is Interrupted, and a peer that is not
    in touch or reports interrupted communication is Offline.
    """
    if scope == LOCAL:
        return HAStatus.ONLINE
    if scope != REMOTE:
        raise ValueError(f"Unknown HA scope: {scope}")

    peer = peer or PeerHealth()
    threshold = heartbeat_delay_ms / 1000 + GRACE_SECONDS

    status = HAStatus.ONLINE
    if peer.age is not None and peer.age >= threshold:
        status = _escalate(status, HAStatus.INTERRUPTED)
    if not peer.in_touch or peer.communication_interrupted:
        status = _escalate(status, HAStatus.OFFLINE)
    return status


def peer_health_from_status(response: Dict[str, Any]) -> Dict[str, PeerHealth]:
    """
    Extract local/remote peer records from a Kea 'status-get' answer.

    Returns an empty mapping when the daemon runs without the HA hook.
    """
    arguments = response.get('arguments') or {}
    ha_list = arguments.get('high-availability') or []
    if not ha_list:
        return {}

    servers = ha_list[0].get('ha-servers') or {}
    peers: Dict[str, PeerHealth] = {}

    local = servers.get(LOCAL)
    if local is not None:
        peers[LOCAL] = PeerHealth(
            in_touch=True,
            role=local.get('role'),
            state=local.get('state'),
        )

    remote = servers.get(REMOTE)
    if remote is not None:
        peers[REMOTE] = PeerHealth(
            age=remote.get('age'),
            in_touch=bool(remote.get('in-touch', False)),
            communication_interrupted=bool(remote.get('communication-interrupted', False)),
            role=remote.get('role'),
            state=remote.get('last-state'),
        )

    return peers
