"""
In-memory adapters.

Process-local fakes of the repository and token store ports for the
component and bootstrap tests. Entities are copied on the way in and out so
callers never mutate stored state by accident.
"""

from __future__ import annotations

import threading
from collections import Counter
from collections.abc import Collection, Sequence
from copy import deepcopy
from datetime import datetime
from uuid import UUID

from src.components.admin.models import AdminUser
from src.components.broadcast.models import AudienceCriteria, EmailLog, Newsletter
from src.components.newsletter.models import (
    Subscriber,
    SubscriberPreference,
    SubscriberStatus,
    UnsubscribeLog,
)
from src.components.templates.models import EmailTemplate
from src.components.tokens.models import TokenPurpose, VerificationToken


class InMemoryTokenStore:
    """Token store guarded by a single lock."""

    def __init__(self) -> None:
        self._rows: dict[tuple[str, str], VerificationToken] = {}
        self._lock = threading.Lock()

    def insert(self, token: VerificationToken) -> None:
        with self._lock:
            self._rows[(token.identifier, token.token)] = token

    def replace_for_identifier(self, token: VerificationToken) -> None:
        with self._lock:
            for key in [k for k in self._rows if k[0] == token.identifier]:
                del self._rows[key]
            self._rows[(token.identifier, token.token)] = token

    def delete_live(
        self,
        identifier: str,
        token: str,
        purpose: TokenPurpose,
        now: datetime,
    ) -> bool:
        with self._lock:
            row = self._rows.get((identifier, token))
            if row is None or row.purpose != purpose or row.is_expired(now):
                return False
            del self._rows[(identifier, token)]
            return True

    def get(self, identifier: str, token: str) -> VerificationToken | None:
        with self._lock:
            return self._rows.get((identifier, token))

    def find_by_token(self, token: str) -> VerificationToken | None:
        with self._lock:
            for (_, value), row in self._rows.items():
                if value == token:
                    return row
            return None

    def delete_expired(self, now: datetime) -> int:
        with self._lock:
            keys = [k for k, row in self._rows.items() if row.is_expired(now)]
            for key in keys:
                del self._rows[key]
            return len(keys)

    # --- Test helpers ---

    def count_for(self, identifier: str) -> int:
        with self._lock:
            return sum(1 for k in self._rows if k[0] == identifier)

    def all(self) -> list[VerificationToken]:
        with self._lock:
            return list(self._rows.values())


class InMemorySubscriberRepo:
    """Subscribers, preferences and the unsubscribe log."""

    def __init__(self) -> None:
        self._subscribers: dict[UUID, Subscriber] = {}
        self._preferences: dict[UUID, SubscriberPreference] = {}
        self.unsubscribe_logs: list[UnsubscribeLog] = []

    def get_by_id(self, subscriber_id: UUID) -> Subscriber | None:
        found = self._subscribers.get(subscriber_id)
        return deepcopy(found) if found else None

    def get_by_email(self, email: str) -> Subscriber | None:
        needle = email.strip().lower()
        for subscriber in self._subscribers.values():
            if subscriber.email.lower() == needle:
                return deepcopy(subscriber)
        return None

    def save(
        self,
        subscriber: Subscriber,
        preference: SubscriberPreference | None = None,
    ) -> Subscriber:
        self._subscribers[subscriber.id] = deepcopy(subscriber)
        if preference is not None:
            self._preferences[subscriber.id] = deepcopy(preference)
        return deepcopy(subscriber)

    def get_preference(self, subscriber_id: UUID) -> SubscriberPreference | None:
        found = self._preferences.get(subscriber_id)
        return deepcopy(found) if found else None

    def record_unsubscribe(self, subscriber: Subscriber, log: UnsubscribeLog) -> None:
        self._subscribers[subscriber.id] = deepcopy(subscriber)
        self.unsubscribe_logs.append(log)

    def list_subscribers(
        self,
        search: str | None = None,
        status: SubscriberStatus | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Subscriber]:
        rows = sorted(self._subscribers.values(), key=lambda s: s.created_at, reverse=True)
        if status is not None:
            rows = [s for s in rows if s.status == status]
        if search:
            term = search.lower()
            rows = [
                s for s in rows if term in s.email.lower() or term in (s.name or "").lower()
            ]
        return [deepcopy(s) for s in rows[offset : offset + limit]]

    def count(self, status: SubscriberStatus | None = None) -> int:
        if status is None:
            return len(self._subscribers)
        return sum(1 for s in self._subscribers.values() if s.status == status)

    def delete_many(self, subscriber_ids: Sequence[UUID]) -> int:
        deleted = 0
        for subscriber_id in subscriber_ids:
            if self._subscribers.pop(subscriber_id, None) is not None:
                deleted += 1
            self._preferences.pop(subscriber_id, None)
        return deleted

    def find_recipients(self, criteria: AudienceCriteria) -> list[Subscriber]:
        recipients = []
        for subscriber in self._subscribers.values():
            preference = self._preferences.get(subscriber.id)
            no_emails = preference.no_emails if preference else False
            if criteria.matches(subscriber, no_emails=no_emails):
                recipients.append(deepcopy(subscriber))
        return recipients


class InMemoryNewsletterRepo:
    def __init__(self) -> None:
        self._newsletters: dict[UUID, Newsletter] = {}

    def save(self, newsletter: Newsletter) -> Newsletter:
        self._newsletters[newsletter.id] = deepcopy(newsletter)
        return newsletter

    def get_by_id(self, newsletter_id: UUID) -> Newsletter | None:
        found = self._newsletters.get(newsletter_id)
        return deepcopy(found) if found else None

    def list_recent(self, limit: int = 50, offset: int = 0) -> list[Newsletter]:
        rows = sorted(self._newsletters.values(), key=lambda n: n.created_at, reverse=True)
        return [deepcopy(n) for n in rows[offset : offset + limit]]

    def list_sent_since(self, since: datetime) -> list[Newsletter]:
        return [
            deepcopy(n)
            for n in self._newsletters.values()
            if n.sent_at is not None and n.sent_at >= since
        ]

    def count_by_template(self, template_id: UUID) -> int:
        return sum(1 for n in self._newsletters.values() if n.template_id == template_id)

    def delete_orphaned(self, author_ids: Collection[UUID]) -> int:
        keep = set(author_ids)
        orphaned = [nid for nid, n in self._newsletters.items() if n.author_id not in keep]
        for nid in orphaned:
            del self._newsletters[nid]
        return len(orphaned)


class InMemoryEmailLogRepo:
    def __init__(self) -> None:
        self.logs: list[EmailLog] = []
        self._lock = threading.Lock()

    def add(self, log: EmailLog) -> None:
        with self._lock:
            self.logs.append(log)

    def count_by_status(self) -> dict[str, int]:
        with self._lock:
            return dict(Counter(log.status.value for log in self.logs))


class InMemoryTemplateRepo:
    def __init__(self) -> None:
        self._templates: dict[UUID, EmailTemplate] = {}

    def get_by_id(self, template_id: UUID) -> EmailTemplate | None:
        found = self._templates.get(template_id)
        return deepcopy(found) if found else None

    def get_by_name(self, name: str) -> EmailTemplate | None:
        for template in self._templates.values():
            if template.name == name:
                return deepcopy(template)
        return None

    def list_all(self, category: str | None = None) -> list[EmailTemplate]:
        rows = sorted(self._templates.values(), key=lambda t: t.created_at, reverse=True)
        if category:
            rows = [t for t in rows if t.category == category]
        return [deepcopy(t) for t in rows]

    def save(self, template: EmailTemplate) -> EmailTemplate:
        self._templates[template.id] = deepcopy(template)
        return template

    def delete_many(self, template_ids: Sequence[UUID]) -> int:
        deleted = 0
        for template_id in template_ids:
            if self._templates.pop(template_id, None) is not None:
                deleted += 1
        return deleted


class InMemoryAdminRepo:
    def __init__(self) -> None:
        self._admins: dict[UUID, AdminUser] = {}

    def get_by_email(self, email: str) -> AdminUser | None:
        needle = email.strip().lower()
        for admin in self._admins.values():
            if admin.email.lower() == needle:
                return deepcopy(admin)
        return None

    def get_by_id(self, admin_id: UUID) -> AdminUser | None:
        found = self._admins.get(admin_id)
        return deepcopy(found) if found else None

    def count(self) -> int:
        return len(self._admins)

    def list_ids(self) -> list[UUID]:
        return list(self._admins)

    def save(self, user: AdminUser) -> None:
        self._admins[user.id] = deepcopy(user)
