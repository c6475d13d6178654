import argparse
import logging
import os
import sys
from datetime import UTC, datetime
from pathlib import Path

from sqlalchemy.orm import Session, sessionmaker

from src.adapters.auth.crypto import PasslibPasswordHasher
from src.adapters.orm import (
    SQLAdminRepo,
    SQLNewsletterRepo,
    SQLTemplateRepo,
    SQLTokenStore,
    init_db,
    make_engine,
    make_session_factory,
)
from src.app_shell.bootstrap import bootstrap_admin
from src.components.broadcast import cleanup_orphaned_newsletters
from src.components.templates import seed_default_templates
from src.components.tokens import purge_expired
from src.rules.loader import load_rules
from src.rules.models import Rules

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("cli")

RULES_PATH = "rules.yaml"


def get_rules(rules_path: str) -> Rules:
    if not Path(rules_path).exists():
        logger.error(f"Rules file {rules_path} not found.")
        sys.exit(1)
    return load_rules(Path(rules_path))


def get_sessions(database_url: str | None) -> sessionmaker[Session]:
    engine = make_engine(database_url)
    init_db(engine)
    return make_session_factory(engine)


def handle_init_db(sessions: sessionmaker[Session], args: argparse.Namespace) -> None:
    print("Database ready.")


def handle_purge_tokens(sessions: sessionmaker[Session], args: argparse.Namespace) -> None:
    count = purge_expired(SQLTokenStore(sessions), datetime.now(UTC))
    print(f"Purged {count} expired tokens.")


def handle_bootstrap_admin(sessions: sessionmaker[Session], args: argparse.Namespace) -> None:
    rules = get_rules(args.rules)
    result = bootstrap_admin(
        rules,
        SQLAdminRepo(sessions),
        PasslibPasswordHasher(),
        args.email or os.environ.get("ADMIN_EMAIL"),
        args.password or os.environ.get("ADMIN_PASSWORD"),
    )
    if not result.success:
        for error in result.errors:
            logger.error(f"{error.field}: {error.message}")
        sys.exit(1)
    if result.created and result.user:
        print(f"Admin created: {result.user.email}")
    else:
        print(f"Skipped: {result.skipped_reason}")


def handle_seed_templates(sessions: sessionmaker[Session], args: argparse.Namespace) -> None:
    created = seed_default_templates(SQLTemplateRepo(sessions))
    print(f"Seeded {created} templates.")


def handle_cleanup_newsletters(sessions: sessionmaker[Session], args: argparse.Namespace) -> None:
    author_ids = SQLAdminRepo(sessions).list_ids()
    deleted = cleanup_orphaned_newsletters(SQLNewsletterRepo(sessions), author_ids)
    print(f"Deleted {deleted} orphaned newsletters.")


HANDLERS = {
    "init-db": handle_init_db,
    "purge-tokens": handle_purge_tokens,
    "bootstrap-admin": handle_bootstrap_admin,
    "seed-templates": handle_seed_templates,
    "cleanup-newsletters": handle_cleanup_newsletters,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Newsletter Service CLI")
    parser.add_argument("--database-url", help="SQLAlchemy URL (defaults to DATABASE_URL)")
    parser.add_argument("--rules", default=RULES_PATH, help="Path to rules.yaml")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create database tables")
    subparsers.add_parser("purge-tokens", help="Delete expired verification tokens")

    bootstrap_parser = subparsers.add_parser(
        "bootstrap-admin", help="Create the first admin account"
    )
    bootstrap_parser.add_argument("--email", help="Admin email (defaults to ADMIN_EMAIL)")
    bootstrap_parser.add_argument(
        "--password", help="Admin password (defaults to ADMIN_PASSWORD)"
    )

    subparsers.add_parser("seed-templates", help="Insert the built-in email templates")
    subparsers.add_parser(
        "cleanup-newsletters", help="Delete newsletters whose author no longer exists"
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    sessions = get_sessions(args.database_url)
    HANDLERS[args.command](sessions, args)


if __name__ == "__main__":
    main()
