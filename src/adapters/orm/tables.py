"""
SQLAlchemy table definitions.

UUIDs are stored as 36-char strings and timestamps as naive UTC so the
schema behaves the same on SQLite and PostgreSQL.
"""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class SubscriberRow(Base):
    __tablename__ = "subscribers"

    id = Column(String(36), primary_key=True)
    email = Column(String(320), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=True)
    status = Column(String(20), index=True, nullable=False, default="PENDING")
    open_count = Column(Integer, nullable=False, default=0)
    click_count = Column(Integer, nullable=False, default=0)
    bounce_count = Column(Integer, nullable=False, default=0)
    complaint_count = Column(Integer, nullable=False, default=0)
    tags = Column(JSON, nullable=False, default=list)  # Mirrors preference categories
    created_at = Column(DateTime, nullable=False)
    subscribed_at = Column(DateTime, nullable=True)
    confirmed_at = Column(DateTime, nullable=True)
    unsubscribed_at = Column(DateTime, nullable=True)
    last_opened_at = Column(DateTime, nullable=True)


class PreferenceRow(Base):
    __tablename__ = "subscriber_preferences"

    subscriber_id = Column(
        String(36), ForeignKey("subscribers.id", ondelete="CASCADE"), primary_key=True
    )
    frequency = Column(String(20), nullable=False, default="WEEKLY")
    categories = Column(JSON, nullable=False, default=list)
    no_emails = Column(Boolean, nullable=False, default=False)
    updated_at = Column(DateTime, nullable=False)


class TokenRow(Base):
    __tablename__ = "verification_tokens"

    identifier = Column(String(320), primary_key=True)
    token = Column(String(128), primary_key=True)
    purpose = Column(String(20), nullable=False)
    expires = Column(DateTime, index=True, nullable=False)


class UnsubscribeLogRow(Base):
    """Append-only. No FK so the history survives subscriber deletion."""

    __tablename__ = "unsubscribe_logs"

    id = Column(String(36), primary_key=True)
    email = Column(String(320), index=True, nullable=False)
    reason = Column(Text, nullable=False)
    subscriber_id = Column(String(36), nullable=True)
    unsubscribed_at = Column(DateTime, nullable=False)


class NewsletterRow(Base):
    __tablename__ = "newsletters"

    id = Column(String(36), primary_key=True)
    title = Column(String(255), nullable=False)
    subject = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    audience = Column(String(20), nullable=False, default="all")
    status = Column(String(20), nullable=False, default="DRAFT")
    recipient_count = Column(Integer, nullable=False, default=0)
    sent_count = Column(Integer, nullable=False, default=0)
    failed_count = Column(Integer, nullable=False, default=0)
    open_count = Column(Integer, nullable=False, default=0)
    click_count = Column(Integer, nullable=False, default=0)
    template_id = Column(String(36), index=True, nullable=True)
    author_id = Column(String(36), index=True, nullable=True)
    created_at = Column(DateTime, nullable=False)
    sent_at = Column(DateTime, index=True, nullable=True)


class EmailLogRow(Base):
    __tablename__ = "email_logs"

    id = Column(String(36), primary_key=True)
    message_id = Column(String(255), nullable=True)
    recipient_email = Column(String(320), nullable=False)
    subscriber_id = Column(String(36), nullable=True)
    newsletter_id = Column(
        String(36), ForeignKey("newsletters.id", ondelete="CASCADE"), index=True, nullable=False
    )
    status = Column(String(20), index=True, nullable=False, default="sent")
    created_at = Column(DateTime, nullable=False)


class TemplateRow(Base):
    __tablename__ = "email_templates"

    id = Column(String(36), primary_key=True)
    name = Column(String(255), unique=True, nullable=False)
    subject = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    preview = Column(Text, nullable=True)
    category = Column(String(50), index=True, nullable=False, default="general")
    author_id = Column(String(36), nullable=True)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)


class AdminUserRow(Base):
    __tablename__ = "admin_users"

    id = Column(String(36), primary_key=True)
    email = Column(String(320), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=True)
    created_at = Column(DateTime, nullable=False)
