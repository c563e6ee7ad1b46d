"""Random fact generators: names, IPs, user agents, file names, dates.

Every function takes the caller's ``random.Random`` so runs are reproducible
under a seed, and none of them keep state of their own.
"""

from __future__ import annotations

import ipaddress
import random as _random_mod
import uuid
from collections.abc import Sequence
from datetime import datetime, timedelta
from typing import Any, TypeVar

from honeyshare.contracts.audit_event import utcnow
from honeyshare.contracts.enums import FileType, SharingLevel, UserRole

T = TypeVar("T")

# ---------------------------------------------------------------------------
# Pools
# ---------------------------------------------------------------------------

FIRST_NAMES: list[str] = [
    "Liam", "Emma", "Noah", "Olivia", "William", "Ava", "James", "Isabella",
    "Oliver", "Sophia", "Benjamin", "Charlotte", "Elijah", "Mia", "Lucas",
    "Amelia", "Mason", "Harper", "Logan", "Evelyn", "Alexander", "Abigail",
    "Ethan", "Emily", "Jacob", "Elizabeth", "Michael", "Mila", "Daniel", "Ella",
    "Henry", "Avery", "Jackson", "Sofia", "Sebastian", "Camila", "Aiden", "Aria",
    "Matthew", "Scarlett", "Samuel", "Victoria", "David", "Madison", "Joseph",
    "Luna", "Carter", "Grace", "Owen", "Chloe", "Wyatt", "Penelope", "John",
    "Layla", "Jack", "Riley", "Luke", "Zoey", "Jayden", "Nora", "Dylan", "Lily",
    "Grayson", "Eleanor", "Levi", "Hannah", "Isaac", "Lillian", "Gabriel",
    "Addison", "Julian", "Aubrey", "Mateo", "Ellie", "Anthony", "Stella",
]

LAST_NAMES: list[str] = [
    "Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller",
    "Davis", "Rodriguez", "Martinez", "Hernandez", "Lopez", "Gonzalez",
    "Wilson", "Anderson", "Thomas", "Taylor", "Moore", "Jackson", "Martin",
    "Lee", "Perez", "Thompson", "White", "Harris", "Sanchez", "Clark",
    "Ramirez", "Lewis", "Robinson", "Walker", "Young", "Allen", "King",
    "Wright", "Scott", "Torres", "Nguyen", "Hill", "Flores", "Green", "Adams",
    "Nelson", "Baker", "Hall", "Rivera", "Campbell", "Mitchell", "Carter",
    "Roberts", "Gomez", "Phillips", "Evans", "Turner", "Diaz", "Parker", "Cruz",
    "Edwards", "Collins", "Reyes", "Stewart", "Morris", "Morales", "Murphy",
    "Cook", "Rogers", "Gutierrez", "Ortiz", "Morgan", "Cooper", "Peterson",
]

USER_AGENTS: list[str] = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) "
    "Version/17.1 Safari/605.1.15",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/119.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36",
]

# Origin pool: Australian consumer/ISP allocations
AUSTRALIAN_IP_RANGES: list[str] = [
    "1.128.0.0/11",
    "14.0.0.0/8",
    "27.0.0.0/8",
    "58.6.0.0/15",
    "101.160.0.0/11",
    "103.1.8.0/22",
    "110.4.0.0/14",
    "115.64.0.0/10",
    "124.148.0.0/14",
    "139.130.0.0/16",
    "150.101.0.0/16",
    "163.47.0.0/16",
    "175.45.0.0/16",
    "180.150.0.0/15",
    "202.0.0.0/11",
]

_NETWORKS = [ipaddress.IPv4Network(cidr) for cidr in AUSTRALIAN_IP_RANGES]

FILE_TYPES: list[FileType] = list(FileType)
USER_ROLES: list[UserRole] = list(UserRole)
SHARING_LEVELS: list[SharingLevel] = list(SharingLevel)

EMAIL_DOMAIN = "exampleapp.com"
EXPIRY_NONE_PROBABILITY = 0.3
EXPIRY_MAX_DAYS = 90


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def pick(rng: _random_mod.Random, seq: Sequence[T]) -> T:
    return seq[rng.randint(0, len(seq) - 1)]


def random_name(rng: _random_mod.Random) -> tuple[str, str]:
    return pick(rng, FIRST_NAMES), pick(rng, LAST_NAMES)


def random_email(first_name: str, last_name: str, domain: str = EMAIL_DOMAIN) -> str:
    return f"{first_name.lower()}.{last_name.lower()}@{domain}"


def user_agent(rng: _random_mod.Random) -> str:
    return pick(rng, USER_AGENTS)


def guid_file_name(rng: _random_mod.Random) -> str:
    """16 hex chars cut from a random (rng-derived) UUID4."""
    return uuid.UUID(int=rng.getrandbits(128), version=4).hex[:16]


# ---------------------------------------------------------------------------
# IP addresses
# ---------------------------------------------------------------------------

def random_ip(rng: _random_mod.Random, ranges: Sequence[str] = AUSTRALIAN_IP_RANGES) -> str:
    """Random host address inside one of *ranges*.

    The host offset is drawn from ``[1, 2**host_bits - 2]`` so the network and
    broadcast addresses are never produced.
    """
    network, prefix_str = pick(rng, ranges).split("/")
    host_bits = 32 - int(prefix_str)
    usable = 2 ** host_bits - 2
    host = rng.randint(1, usable)

    base = 0
    for octet in network.split("."):
        base = (base << 8) | int(octet)
    host_mask = (1 << host_bits) - 1
    addr = (base & ~host_mask & 0xFFFFFFFF) | host

    return ".".join(str((addr >> shift) & 255) for shift in (24, 16, 8, 0))


def ip_in_allowed_ranges(address: str) -> bool:
    try:
        ip = ipaddress.IPv4Address(address)
    except ValueError:
        return False
    return any(ip in net for net in _NETWORKS)


def allowed_ip_ranges(rng: _random_mod.Random) -> list[str]:
    """1–5 ``ip/prefix`` strings (prefix 16..23) for the global settings row."""
    count = rng.randint(1, 5)
    return [f"{random_ip(rng)}/{rng.randint(16, 23)}" for _ in range(count)]


# ---------------------------------------------------------------------------
# Dates and misc
# ---------------------------------------------------------------------------

def random_date(rng: _random_mod.Random, days_from_now: float = 30,
                now: datetime | None = None) -> datetime:
    """Uniform instant between *now* and *now + days_from_now*."""
    start = now or utcnow()
    return start + timedelta(seconds=rng.uniform(0, days_from_now * 86400))


def expiry_date(rng: _random_mod.Random, now: datetime | None = None) -> datetime | None:
    if rng.random() < EXPIRY_NONE_PROBABILITY:
        return None
    return random_date(rng, rng.randint(1, EXPIRY_MAX_DAYS), now)


def sharing_level(rng: _random_mod.Random) -> SharingLevel:
    return pick(rng, SHARING_LEVELS)


def chance(rng: _random_mod.Random, probability: float) -> bool:
    return rng.random() < probability


def describe_pools() -> dict[str, Any]:
    """Pool sizes, logged once at simulator start."""
    return {
        "first_names": len(FIRST_NAMES),
        "last_names": len(LAST_NAMES),
        "user_agents": len(USER_AGENTS),
        "ip_ranges": len(AUSTRALIAN_IP_RANGES),
    }
