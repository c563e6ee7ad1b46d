"""Reference data seeding: random users, file links and global settings."""

from __future__ import annotations

import logging
import random as _random_mod
from datetime import datetime, timedelta

from honeyshare.contracts.audit_event import utcnow
from honeyshare.contracts.reference import FileLink, GlobalSettings, User
from honeyshare.simulator.generators import (
    FILE_TYPES,
    USER_ROLES,
    allowed_ip_ranges,
    chance,
    expiry_date,
    guid_file_name,
    pick,
    random_email,
    random_name,
    sharing_level,
)
from honeyshare.store.repository import AuditStore

log = logging.getLogger(__name__)

# The shared admin account survives every reseed.
ADMIN_EMAIL = "admin@exampleapp.com"

# Flag probabilities for seeded entities
P_MFA = 0.3
P_LOCAL_LOGIN = 0.8
P_IDP_LOGIN = 0.4
P_USER_ACTIVE = 0.9
P_FILE_PASSWORD = 0.4
P_FILE_ACTIVE = 0.85
P_FORCE_IDP = 0.3


def seed_reference_data(
    store: AuditStore,
    rng: _random_mod.Random,
    users: int = 50,
    files: int = 200,
    now: datetime | None = None,
) -> dict[str, int]:
    """Wipe and repopulate reference data.

    ``created_at`` values step one second apart ending at *now*, so the
    "most recent" ordering used by the simulator follows creation order.
    Duplicate e-mails (same random name twice) are skipped.

    Returns:
        Counts of created users and files.
    """
    now = now or utcnow()
    removed = store.clear(keep_email=ADMIN_EMAIL)
    log.info("Seeding: cleared %d events, %d files, %d users",
             removed["events"], removed["files"], removed["users"])

    created_users: list[User] = []
    seen: set[str] = {ADMIN_EMAIL}
    total = users + files
    for i in range(users):
        first, last = random_name(rng)
        email = random_email(first, last)
        if email in seen:
            log.warning("Skipping duplicate user: %s", email)
            continue
        seen.add(email)
        user = User(
            first_name=first,
            last_name=last,
            email=email,
            role=pick(rng, USER_ROLES),
            mfa_enabled=chance(rng, P_MFA),
            allow_local_login=chance(rng, P_LOCAL_LOGIN),
            allow_idp_login=chance(rng, P_IDP_LOGIN),
            active=chance(rng, P_USER_ACTIVE),
            created_at=now - timedelta(seconds=total - i),
        )
        created_users.append(store.add_user(user))
    log.info("Created %d users", len(created_users))

    created_files = 0
    if created_users:
        for j in range(files):
            owner = pick(rng, created_users)
            store.add_file_link(
                FileLink(
                    owner_id=owner.id,
                    file_name=guid_file_name(rng),
                    file_type=pick(rng, FILE_TYPES),
                    has_password=chance(rng, P_FILE_PASSWORD),
                    expiry_date=expiry_date(rng, now),
                    active=chance(rng, P_FILE_ACTIVE),
                    created_at=now - timedelta(seconds=files - j),
                )
            )
            created_files += 1
    elif files:
        log.warning("No users created, skipping %d file links", files)
    log.info("Created %d file sharing links", created_files)

    store.save_global_settings(
        GlobalSettings(
            allowed_ip_ranges=allowed_ip_ranges(rng),
            force_idp_login=chance(rng, P_FORCE_IDP),
            sharing_level=sharing_level(rng),
            created_at=now,
        )
    )
    log.info("Database seeded: %d users, %d files", len(created_users), created_files)
    return {"users": len(created_users), "files": created_files}
