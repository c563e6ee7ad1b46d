"""Event synthesizer — turns a spike flag plus reference snapshots into one event."""

from __future__ import annotations

import logging
import random as _random_mod
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from honeyshare.contracts.audit_event import AuditEvent, utcnow
from honeyshare.contracts.enums import LOGIN_EVENTS, EventType
from honeyshare.contracts.reference import FileLink, User
from honeyshare.simulator.generators import chance, pick, random_ip, user_agent

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class EventMix:
    """Probability thresholds of the event distribution.

    Steady state draws ``r`` uniformly from [0, 1)::

        r < download_below          -> download
        r < login_below             -> login
        r < failed_download_below   -> failedDownload
        otherwise                   -> failedLogin

    During a spike only failures are produced: ``failedLogin`` with
    probability ``spike_failed_login``, ``failedDownload`` otherwise.
    ``owner_attribution`` is the chance a download names the file owner.
    """

    download_below: float = 0.5
    login_below: float = 0.8
    failed_download_below: float = 0.9
    spike_failed_login: float = 0.7
    owner_attribution: float = 0.3

    def __post_init__(self) -> None:
        steady = (self.download_below, self.login_below, self.failed_download_below)
        if not 0.0 <= steady[0] <= steady[1] <= steady[2] <= 1.0:
            raise ValueError(f"steady thresholds must be ascending within [0, 1]: {steady}")
        for name in ("spike_failed_login", "owner_attribution"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {value}")


DEFAULT_MIX = EventMix()

DETAILS: dict[EventType, str] = {
    EventType.LOGIN: "Successful login",
    EventType.FAILED_LOGIN: "Invalid password attempt",
    EventType.DOWNLOAD: "File downloaded successfully",
    EventType.FAILED_DOWNLOAD: "Access denied - expired link",
}


class EventSynthesizer:
    def __init__(self, rng: _random_mod.Random, mix: EventMix = DEFAULT_MIX) -> None:
        self.rng = rng
        self.mix = mix

    def choose_event_type(self, spike: bool) -> EventType:
        if spike:
            if self.rng.random() < self.mix.spike_failed_login:
                return EventType.FAILED_LOGIN
            return EventType.FAILED_DOWNLOAD
        r = self.rng.random()
        if r < self.mix.download_below:
            return EventType.DOWNLOAD
        if r < self.mix.login_below:
            return EventType.LOGIN
        if r < self.mix.failed_download_below:
            return EventType.FAILED_DOWNLOAD
        return EventType.FAILED_LOGIN

    def synthesize(
        self,
        spike: bool,
        users: Sequence[User],
        files: Sequence[FileLink],
        now: datetime | None = None,
    ) -> AuditEvent | None:
        """Build one event, or ``None`` when a login type finds no user.

        Downloads go ahead without a target when no file is available; only
        login types require their reference entity.
        """
        event_type = self.choose_event_type(spike)
        actor_id: str | None = None
        target_id: str | None = None

        if event_type in LOGIN_EVENTS:
            if not users:
                log.debug("No users available, skipping %s event", event_type.value)
                return None
            actor_id = pick(self.rng, users).id
        elif files:
            target = pick(self.rng, files)
            target_id = target.id
            # most downloads stay anonymous
            if chance(self.rng, self.mix.owner_attribution):
                actor_id = target.owner_id

        return AuditEvent(
            event_type=event_type,
            actor_id=actor_id,
            target_id=target_id,
            origin_address=random_ip(self.rng),
            client_signature=user_agent(self.rng),
            detail=DETAILS[event_type],
            timestamp=now or utcnow(),
        )
