"""
SQLAlchemy repositories implementing the component ports.

Each method runs in its own session; writes use `sessionmaker.begin()` so
they commit (or roll back) as one transaction.
"""

from __future__ import annotations

import builtins
from collections.abc import Collection, Sequence
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import delete, func, or_, select
from sqlalchemy.orm import Session, sessionmaker

from src.adapters.orm.tables import (
    AdminUserRow,
    EmailLogRow,
    NewsletterRow,
    PreferenceRow,
    SubscriberRow,
    TemplateRow,
    TokenRow,
    UnsubscribeLogRow,
)
from src.components.admin.models import AdminUser
from src.components.broadcast.models import (
    Audience,
    AudienceCriteria,
    EmailLog,
    EmailLogStatus,
    Newsletter,
    NewsletterStatus,
)
from src.components.newsletter.models import (
    Frequency,
    Subscriber,
    SubscriberPreference,
    SubscriberStatus,
    UnsubscribeLog,
)
from src.components.templates.models import EmailTemplate
from src.components.tokens.models import TokenPurpose, VerificationToken

SessionFactory = sessionmaker[Session]


def to_db(dt: datetime | None) -> datetime | None:
    """Aware datetime -> naive UTC."""
    if dt is None:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(UTC).replace(tzinfo=None)
    return dt


def from_db(dt: datetime | None) -> datetime | None:
    """Naive UTC -> aware UTC."""
    if dt is None:
        return None
    return dt.replace(tzinfo=UTC) if dt.tzinfo is None else dt


def _uuid(value: str | None) -> UUID | None:
    return UUID(value) if value else None


def _str(value: UUID | None) -> str | None:
    return str(value) if value else None


class SQLTokenStore:
    def __init__(self, session_factory: SessionFactory):
        self._sessions = session_factory

    def insert(self, token: VerificationToken) -> None:
        with self._sessions.begin() as session:
            session.add(
                TokenRow(
                    identifier=token.identifier,
                    token=token.token,
                    purpose=token.purpose.value,
                    expires=to_db(token.expires),
                )
            )

    def replace_for_identifier(self, token: VerificationToken) -> None:
        # Delete and insert share one write transaction so concurrent issuers queue.
        with self._sessions.begin() as session:
            session.execute(
                delete(TokenRow)
                .where(TokenRow.identifier == token.identifier)
                .execution_options(synchronize_session=False)
            )
            session.add(
                TokenRow(
                    identifier=token.identifier,
                    token=token.token,
                    purpose=token.purpose.value,
                    expires=to_db(token.expires),
                )
            )

    def delete_live(
        self,
        identifier: str,
        token: str,
        purpose: TokenPurpose,
        now: datetime,
    ) -> bool:
        # One conditional DELETE; the database serializes concurrent callers.
        with self._sessions.begin() as session:
            result = session.execute(
                delete(TokenRow)
                .where(
                    TokenRow.identifier == identifier,
                    TokenRow.token == token,
                    TokenRow.purpose == purpose.value,
                    TokenRow.expires > to_db(now),
                )
                .execution_options(synchronize_session=False)
            )
            return result.rowcount == 1

    def get(self, identifier: str, token: str) -> VerificationToken | None:
        with self._sessions() as session:
            row = session.get(TokenRow, (identifier, token))
            return self._map_row(row) if row else None

    def find_by_token(self, token: str) -> VerificationToken | None:
        with self._sessions() as session:
            row = session.scalars(select(TokenRow).where(TokenRow.token == token)).first()
            return self._map_row(row) if row else None

    def delete_expired(self, now: datetime) -> int:
        with self._sessions.begin() as session:
            result = session.execute(
                delete(TokenRow)
                .where(TokenRow.expires <= to_db(now))
                .execution_options(synchronize_session=False)
            )
            return result.rowcount

    def _map_row(self, row: TokenRow) -> VerificationToken:
        return VerificationToken(
            identifier=row.identifier,
            token=row.token,
            purpose=TokenPurpose(row.purpose),
            expires=from_db(row.expires),
        )


class SQLSubscriberRepo:
    def __init__(self, session_factory: SessionFactory):
        self._sessions = session_factory

    def get_by_id(self, subscriber_id: UUID) -> Subscriber | None:
        with self._sessions() as session:
            row = session.get(SubscriberRow, str(subscriber_id))
            return self._map_row(row) if row else None

    def get_by_email(self, email: str) -> Subscriber | None:
        with self._sessions() as session:
            row = session.scalars(
                select(SubscriberRow).where(
                    func.lower(SubscriberRow.email) == email.strip().lower()
                )
            ).first()
            return self._map_row(row) if row else None

    def save(
        self,
        subscriber: Subscriber,
        preference: SubscriberPreference | None = None,
    ) -> Subscriber:
        with self._sessions.begin() as session:
            session.merge(self._to_row(subscriber))
            if preference is not None:
                # Parent row must exist before the FK'd preference row.
                session.flush()
                session.merge(
                    PreferenceRow(
                        subscriber_id=str(preference.subscriber_id),
                        frequency=preference.frequency.value,
                        categories=list(preference.categories),
                        no_emails=preference.no_emails,
                        updated_at=to_db(preference.updated_at),
                    )
                )
        return subscriber

    def get_preference(self, subscriber_id: UUID) -> SubscriberPreference | None:
        with self._sessions() as session:
            row = session.get(PreferenceRow, str(subscriber_id))
            if row is None:
                return None
            return SubscriberPreference(
                subscriber_id=UUID(row.subscriber_id),
                frequency=Frequency(row.frequency),
                categories=list(row.categories or []),
                no_emails=bool(row.no_emails),
                updated_at=from_db(row.updated_at),
            )

    def record_unsubscribe(self, subscriber: Subscriber, log: UnsubscribeLog) -> None:
        with self._sessions.begin() as session:
            session.merge(self._to_row(subscriber))
            session.add(
                UnsubscribeLogRow(
                    id=str(log.id),
                    email=log.email,
                    reason=log.reason,
                    subscriber_id=_str(log.subscriber_id),
                    unsubscribed_at=to_db(log.unsubscribed_at),
                )
            )

    def list_unsubscribe_logs(self, email: str | None = None) -> builtins.list[UnsubscribeLog]:
        with self._sessions() as session:
            stmt = select(UnsubscribeLogRow).order_by(UnsubscribeLogRow.unsubscribed_at)
            if email:
                stmt = stmt.where(UnsubscribeLogRow.email == email)
            return [
                UnsubscribeLog(
                    email=row.email,
                    reason=row.reason,
                    subscriber_id=_uuid(row.subscriber_id),
                    id=UUID(row.id),
                    unsubscribed_at=from_db(row.unsubscribed_at),
                )
                for row in session.scalars(stmt)
            ]

    def list_subscribers(
        self,
        search: str | None = None,
        status: SubscriberStatus | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> builtins.list[Subscriber]:
        stmt = select(SubscriberRow).order_by(SubscriberRow.created_at.desc())
        if status is not None:
            stmt = stmt.where(SubscriberRow.status == status.value)
        if search:
            pattern = f"%{search.lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(SubscriberRow.email).like(pattern),
                    func.lower(SubscriberRow.name).like(pattern),
                )
            )
        with self._sessions() as session:
            rows = session.scalars(stmt.limit(limit).offset(offset))
            return [self._map_row(row) for row in rows]

    def count(self, status: SubscriberStatus | None = None) -> int:
        stmt = select(func.count()).select_from(SubscriberRow)
        if status is not None:
            stmt = stmt.where(SubscriberRow.status == status.value)
        with self._sessions() as session:
            return session.scalar(stmt) or 0

    def delete_many(self, subscriber_ids: Sequence[UUID]) -> int:
        ids = [str(i) for i in subscriber_ids]
        if not ids:
            return 0
        with self._sessions.begin() as session:
            session.execute(
                delete(PreferenceRow)
                .where(PreferenceRow.subscriber_id.in_(ids))
                .execution_options(synchronize_session=False)
            )
            result = session.execute(
                delete(SubscriberRow)
                .where(SubscriberRow.id.in_(ids))
                .execution_options(synchronize_session=False)
            )
            return result.rowcount

    def find_recipients(self, criteria: AudienceCriteria) -> builtins.list[Subscriber]:
        stmt = (
            select(SubscriberRow)
            .outerjoin(PreferenceRow, PreferenceRow.subscriber_id == SubscriberRow.id)
            .where(SubscriberRow.status == criteria.status.value)
            .order_by(SubscriberRow.created_at)
        )
        if criteria.exclude_no_emails:
            stmt = stmt.where(
                or_(PreferenceRow.no_emails.is_(None), PreferenceRow.no_emails.is_(False))
            )
        if criteria.last_opened_since is not None:
            stmt = stmt.where(SubscriberRow.last_opened_at >= to_db(criteria.last_opened_since))
        if criteria.created_since is not None:
            stmt = stmt.where(SubscriberRow.created_at >= to_db(criteria.created_since))
        if criteria.min_open_count is not None:
            stmt = stmt.where(SubscriberRow.open_count >= criteria.min_open_count)
        with self._sessions() as session:
            return [self._map_row(row) for row in session.scalars(stmt)]

    def _to_row(self, subscriber: Subscriber) -> SubscriberRow:
        return SubscriberRow(
            id=str(subscriber.id),
            email=subscriber.email,
            name=subscriber.name,
            status=subscriber.status.value,
            open_count=subscriber.open_count,
            click_count=subscriber.click_count,
            bounce_count=subscriber.bounce_count,
            complaint_count=subscriber.complaint_count,
            tags=list(subscriber.tags),
            created_at=to_db(subscriber.created_at),
            subscribed_at=to_db(subscriber.subscribed_at),
            confirmed_at=to_db(subscriber.confirmed_at),
            unsubscribed_at=to_db(subscriber.unsubscribed_at),
            last_opened_at=to_db(subscriber.last_opened_at),
        )

    def _map_row(self, row: SubscriberRow) -> Subscriber:
        return Subscriber(
            email=row.email,
            name=row.name,
            id=UUID(row.id),
            status=SubscriberStatus(row.status),
            open_count=row.open_count,
            click_count=row.click_count,
            bounce_count=row.bounce_count,
            complaint_count=row.complaint_count,
            tags=list(row.tags or []),
            created_at=from_db(row.created_at),
            subscribed_at=from_db(row.subscribed_at),
            confirmed_at=from_db(row.confirmed_at),
            unsubscribed_at=from_db(row.unsubscribed_at),
            last_opened_at=from_db(row.last_opened_at),
        )


class SQLNewsletterRepo:
    def __init__(self, session_factory: SessionFactory):
        self._sessions = session_factory

    def save(self, newsletter: Newsletter) -> Newsletter:
        with self._sessions.begin() as session:
            session.merge(
                NewsletterRow(
                    id=str(newsletter.id),
                    title=newsletter.title,
                    subject=newsletter.subject,
                    content=newsletter.content,
                    audience=newsletter.audience.value,
                    status=newsletter.status.value,
                    recipient_count=newsletter.recipient_count,
                    sent_count=newsletter.sent_count,
                    failed_count=newsletter.failed_count,
                    open_count=newsletter.open_count,
                    click_count=newsletter.click_count,
                    template_id=_str(newsletter.template_id),
                    author_id=_str(newsletter.author_id),
                    created_at=to_db(newsletter.created_at),
                    sent_at=to_db(newsletter.sent_at),
                )
            )
        return newsletter

    def get_by_id(self, newsletter_id: UUID) -> Newsletter | None:
        with self._sessions() as session:
            row = session.get(NewsletterRow, str(newsletter_id))
            return self._map_row(row) if row else None

    def list_recent(self, limit: int = 50, offset: int = 0) -> builtins.list[Newsletter]:
        stmt = (
            select(NewsletterRow)
            .order_by(NewsletterRow.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        with self._sessions() as session:
            return [self._map_row(row) for row in session.scalars(stmt)]

    def list_sent_since(self, since: datetime) -> builtins.list[Newsletter]:
        stmt = select(NewsletterRow).where(NewsletterRow.sent_at >= to_db(since))
        with self._sessions() as session:
            return [self._map_row(row) for row in session.scalars(stmt)]

    def count_by_template(self, template_id: UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(NewsletterRow)
            .where(NewsletterRow.template_id == str(template_id))
        )
        with self._sessions() as session:
            return session.scalar(stmt) or 0

    def delete_orphaned(self, author_ids: Collection[UUID]) -> int:
        keep = [str(a) for a in author_ids]
        with self._sessions.begin() as session:
            orphaned = or_(NewsletterRow.author_id.is_(None), NewsletterRow.author_id.not_in(keep))
            ids = session.scalars(select(NewsletterRow.id).where(orphaned)).all()
            if not ids:
                return 0
            session.execute(
                delete(EmailLogRow)
                .where(EmailLogRow.newsletter_id.in_(ids))
                .execution_options(synchronize_session=False)
            )
            result = session.execute(
                delete(NewsletterRow)
                .where(NewsletterRow.id.in_(ids))
                .execution_options(synchronize_session=False)
            )
            return result.rowcount

    def _map_row(self, row: NewsletterRow) -> Newsletter:
        return Newsletter(
            title=row.title,
            subject=row.subject,
            content=row.content,
            author_id=_uuid(row.author_id),
            template_id=_uuid(row.template_id),
            audience=Audience(row.audience),
            id=UUID(row.id),
            status=NewsletterStatus(row.status),
            recipient_count=row.recipient_count,
            sent_count=row.sent_count,
            failed_count=row.failed_count,
            open_count=row.open_count,
            click_count=row.click_count,
            created_at=from_db(row.created_at),
            sent_at=from_db(row.sent_at),
        )


class SQLEmailLogRepo:
    def __init__(self, session_factory: SessionFactory):
        self._sessions = session_factory

    def add(self, log: EmailLog) -> None:
        with self._sessions.begin() as session:
            session.add(
                EmailLogRow(
                    id=str(log.id),
                    message_id=log.message_id,
                    recipient_email=log.recipient_email,
                    subscriber_id=_str(log.subscriber_id),
                    newsletter_id=str(log.newsletter_id),
                    status=log.status.value,
                    created_at=to_db(log.created_at),
                )
            )

    def count_by_status(self) -> dict[str, int]:
        stmt = select(EmailLogRow.status, func.count()).group_by(EmailLogRow.status)
        with self._sessions() as session:
            return {status: count for status, count in session.execute(stmt)}

    def list_for_newsletter(self, newsletter_id: UUID) -> builtins.list[EmailLog]:
        stmt = select(EmailLogRow).where(EmailLogRow.newsletter_id == str(newsletter_id))
        with self._sessions() as session:
            return [
                EmailLog(
                    recipient_email=row.recipient_email,
                    newsletter_id=UUID(row.newsletter_id),
                    subscriber_id=_uuid(row.subscriber_id),
                    message_id=row.message_id,
                    status=EmailLogStatus(row.status),
                    id=UUID(row.id),
                    created_at=from_db(row.created_at),
                )
                for row in session.scalars(stmt)
            ]


class SQLTemplateRepo:
    def __init__(self, session_factory: SessionFactory):
        self._sessions = session_factory

    def get_by_id(self, template_id: UUID) -> EmailTemplate | None:
        with self._sessions() as session:
            row = session.get(TemplateRow, str(template_id))
            return self._map_row(row) if row else None

    def get_by_name(self, name: str) -> EmailTemplate | None:
        with self._sessions() as session:
            row = session.scalars(select(TemplateRow).where(TemplateRow.name == name)).first()
            return self._map_row(row) if row else None

    def list_all(self, category: str | None = None) -> builtins.list[EmailTemplate]:
        stmt = select(TemplateRow).order_by(TemplateRow.created_at.desc())
        if category:
            stmt = stmt.where(TemplateRow.category == category)
        with self._sessions() as session:
            return [self._map_row(row) for row in session.scalars(stmt)]

    def save(self, template: EmailTemplate) -> EmailTemplate:
        with self._sessions.begin() as session:
            session.merge(
                TemplateRow(
                    id=str(template.id),
                    name=template.name,
                    subject=template.subject,
                    content=template.content,
                    preview=template.preview,
                    category=template.category,
                    author_id=_str(template.author_id),
                    created_at=to_db(template.created_at),
                    updated_at=to_db(template.updated_at),
                )
            )
        return template

    def delete_many(self, template_ids: Sequence[UUID]) -> int:
        ids = [str(i) for i in template_ids]
        if not ids:
            return 0
        with self._sessions.begin() as session:
            result = session.execute(
                delete(TemplateRow)
                .where(TemplateRow.id.in_(ids))
                .execution_options(synchronize_session=False)
            )
            return result.rowcount

    def _map_row(self, row: TemplateRow) -> EmailTemplate:
        return EmailTemplate(
            name=row.name,
            subject=row.subject,
            content=row.content,
            author_id=_uuid(row.author_id),
            preview=row.preview,
            category=row.category,
            id=UUID(row.id),
            created_at=from_db(row.created_at),
            updated_at=from_db(row.updated_at),
        )


class SQLAdminRepo:
    def __init__(self, session_factory: SessionFactory):
        self._sessions = session_factory

    def get_by_email(self, email: str) -> AdminUser | None:
        with self._sessions() as session:
            row = session.scalars(
                select(AdminUserRow).where(func.lower(AdminUserRow.email) == email.strip().lower())
            ).first()
            return self._map_row(row) if row else None

    def get_by_id(self, admin_id: UUID) -> AdminUser | None:
        with self._sessions() as session:
            row = session.get(AdminUserRow, str(admin_id))
            return self._map_row(row) if row else None

    def count(self) -> int:
        with self._sessions() as session:
            return session.scalar(select(func.count()).select_from(AdminUserRow)) or 0

    def list_ids(self) -> builtins.list[UUID]:
        with self._sessions() as session:
            return [UUID(i) for i in session.scalars(select(AdminUserRow.id))]

    def save(self, user: AdminUser) -> None:
        with self._sessions.begin() as session:
            session.merge(
                AdminUserRow(
                    id=str(user.id),
                    email=user.email,
                    password_hash=user.password_hash,
                    name=user.name,
                    created_at=to_db(user.created_at),
                )
            )

    def _map_row(self, row: AdminUserRow) -> AdminUser:
        return AdminUser(
            email=row.email,
            password_hash=row.password_hash,
            name=row.name,
            id=UUID(row.id),
            created_at=from_db(row.created_at),
        )
