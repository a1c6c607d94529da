"""
Database management commands.

    python -m migrations.manage_db migrate [revision] [--downgrade]
    python -m migrations.manage_db create "message"
    python -m migrations.manage_db init
    python -m migrations.manage_db create-admin admin@example.com
    python -m migrations.manage_db prune-audit [--days 365]
"""
import getpass
import logging
import argparse
import sys

from alembic.config import Config
from alembic import command

from alnet.core.config import settings
from alnet.db.init_db import create_all_tables
from alnet.db.session import SessionLocal
from alnet.modules.audit.services.audit import purge_audit_logs
from alnet.modules.auth.services.auth import create_admin_account
from alnet.modules.user_management.services.user import get_user_by_email

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger("alnet.manage_db")

def run_migration(args):
    """Run database migrations"""
    alembic_cfg = Config("alembic.ini")
    try:
        if args.downgrade:
            command.downgrade(alembic_cfg, args.revision)
        else:
            command.upgrade(alembic_cfg, args.revision)
        logger.info(f"Migration {'downgrade' if args.downgrade else 'upgrade'} to {args.revision} completed")
    except Exception as e:
        logger.error(f"Migration failed: {e}")
        raise

def create_migration(args):
    """Create a new migration"""
    try:
        alembic_cfg = Config("alembic.ini")
        command.revision(alembic_cfg, message=args.message, autogenerate=True)
        logger.info("Migration created successfully")
    except Exception as e:
        logger.error(f"Failed to create migration: {e}")
        raise

def init_tables(args):
    """Create missing tables directly from the models, skipping Alembic"""
    logger.info(f"Initializing database at: {settings.DATABASE_URL}")
    if not create_all_tables():
        sys.exit(1)
    logger.info("Database initialization completed successfully")

def create_admin(args):
    password = args.password or getpass.getpass("Admin password: ")
    if len(password) < 8:
        logger.error("Password must be at least 8 characters")
        sys.exit(1)

    db = SessionLocal()
    try:
        if get_user_by_email(db, args.email):
            logger.error(f"A user with email {args.email} already exists")
            sys.exit(1)
        user = create_admin_account(db, args.email, password)
        logger.info(f"Admin account {user.email} created")
    finally:
        db.close()

def prune_audit(args):
    """Delete non-sensitive audit entries past the retention window"""
    db = SessionLocal()
    try:
        removed = purge_audit_logs(db, args.days)
        logger.info(f"Removed {removed} audit entries older than {args.days} days")
    finally:
        db.close()

def main():
    parser = argparse.ArgumentParser(description="Database management commands")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    migrate_parser = subparsers.add_parser("migrate", help="Run migrations")
    migrate_parser.add_argument("--downgrade", action="store_true", help="Downgrade instead of upgrade")
    migrate_parser.add_argument("revision", nargs="?", default="head", help="Revision to migrate to")
    migrate_parser.set_defaults(func=run_migration)

    create_parser = subparsers.add_parser("create", help="Create a new migration")
    create_parser.add_argument("message", help="Migration message")
    create_parser.set_defaults(func=create_migration)

    init_parser = subparsers.add_parser("init", help="Create all tables without migrations")
    init_parser.set_defaults(func=init_tables)

    admin_parser = subparsers.add_parser("create-admin", help="Create an administrator account")
    admin_parser.add_argument("email", help="Admin email address")
    admin_parser.add_argument("--password", help="Password (prompted when omitted)")
    admin_parser.set_defaults(func=create_admin)

    prune_parser = subparsers.add_parser("prune-audit", help="Delete old non-sensitive audit entries")
    prune_parser.add_argument("--days", type=int, default=settings.AUDIT_RETENTION_DAYS, help="Retention window in days")
    prune_parser.set_defaults(func=prune_audit)

    args = parser.parse_args()
    if hasattr(args, 'func'):
        args.func(args)
    else:
        parser.print_help()

if __name__ == "__main__":
    main()
