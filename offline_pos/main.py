#!/usr/bin/env python3
"""
Command line entry point for the offline POS cache.

Wires configuration, the local store, the offline data service and the API
facade together, and exposes maintenance and report commands.
"""

import argparse
import json
import sys
from typing import List, Optional

from .api import ApiResponse, OfflineAPI
from .config import get_config_manager
from .database import StoreError, create_local_store
from .models import ActionType, Actor, AuditLog
from .services import ConnectivityMonitor, OfflineDataService
from .services.cart_service import CartService
from .utils import AuditLogger, generate_encryption_key, get_logger


class OfflinePOSApplication:
    """Main application controller."""

    def __init__(self, config_dir: Optional[str] = None) -> None:
        self.config = get_config_manager(config_dir)
        self.logger = get_logger("offline_pos")
        self.store = None
        self.audit_logger = None
        self.service = None
        self.api = None
        self.cart_service = None

    def initialize(self, seed: Optional[bool] = None) -> bool:
        """
        Initialize application components.

        Args:
            seed: Override the seeding.enabled setting

        Returns:
            True if initialization successful
        """
        try:
            db_path = self.config.get("database.path", "data/offline_pos.db")
            encryption_key = None
            if self.config.get("database.encrypted", False):
                encryption_key = self.config.get_store_encryption_key()
                if encryption_key is None:
                    self.logger.error(
                        "Store encryption is enabled but no store_encryption_key credential is set"
                    )
                    return False

            self.logger.info(f"Opening local store: {db_path}")
            self.store = create_local_store(db_path, encryption_key)
            self.audit_logger = AuditLogger(self.store)

            if seed is None:
                seed = self.config.get("seeding.enabled", True)

            self.service = OfflineDataService(
                self.store,
                connectivity=ConnectivityMonitor.from_config(self.config),
                audit_logger=self.audit_logger,
                seed_sample_data=seed,
            )
            self.api = OfflineAPI(
                self.service,
                id_prefix=self.config.get("orders.id_prefix", "MA-JAF"),
            )
            self.cart_service = CartService(
                self.api,
                default_payment_method=self.config.get("orders.default_payment_method", "cash"),
            )

            self.audit_logger.log_action(
                action_type=ActionType.SYSTEM_STARTUP,
                actor=Actor.SYSTEM,
                details={"version": self.config.get("app_version", "0.1.0")},
            )
            self.logger.info("Application initialized successfully")
            return True

        except (StoreError, FileNotFoundError) as e:
            self.logger.error(f"Initialization failed: {e}")
            return False

    def shutdown(self) -> None:
        """Clean shutdown of the application."""
        if self.audit_logger:
            self.audit_logger.log_action(
                action_type=ActionType.SYSTEM_SHUTDOWN,
                actor=Actor.SYSTEM,
            )
        self.logger.info("Application shutdown complete")


def _print_response(response: ApiResponse) -> int:
    print(json.dumps(response.to_dict(), indent=2))
    return 0 if response.success else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="offline-pos",
        description="Inspect and maintain the offline POS local cache",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s status                 # Connectivity, last sync, outbox depth
  %(prog)s items --active         # Items that can be sold
  %(prog)s dashboard              # Headline counts and revenue
  %(prog)s sales --by-day         # Revenue per day
  %(prog)s reset --yes            # Wipe the cache (logout/reset)
  %(prog)s keygen                 # Encrypt stores created from now on
        """
    )
    parser.add_argument(
        '--config-dir',
        help='Directory holding app_config.json (default: $OFFLINE_POS_CONFIG_DIR or config/)'
    )
    parser.add_argument(
        '--no-seed',
        action='store_true',
        help='Do not import sample data into an empty store'
    )

    subparsers = parser.add_subparsers(dest='command', required=True)
    subparsers.add_parser('status', help='Show connectivity and sync status')
    subparsers.add_parser('seed', help='Import sample data if the store is empty')

    reset = subparsers.add_parser('reset', help='Clear all cached data')
    reset.add_argument('--yes', action='store_true', help='Confirm the reset')

    items = subparsers.add_parser('items', help='List cached items')
    items.add_argument('--active', action='store_true', help='Only items that can be sold')

    subparsers.add_parser('orders', help='List cached orders')
    subparsers.add_parser('categories', help='List cached categories')
    subparsers.add_parser('users', help='List cached users')
    subparsers.add_parser('dashboard', help='Show dashboard stats')
    subparsers.add_parser('inventory', help='Show stock level per item')

    sales = subparsers.add_parser('sales', help='Show sales analytics')
    sales.add_argument('--by-day', action='store_true', help='Group sales by calendar day')

    subparsers.add_parser('outbox', help='List mutations waiting for sync')

    audit = subparsers.add_parser('audit', help='Show recent audit entries')
    audit.add_argument('--limit', type=int, default=20, help='Number of entries (default: 20)')

    backup = subparsers.add_parser('backup', help='Copy the local store to a file')
    backup.add_argument('path', help='Destination database file')

    subparsers.add_parser('vacuum', help='Reclaim unused space in the local store')
    subparsers.add_parser('keygen', help='Create a store encryption key for new databases')
    return parser


def run_command(app: OfflinePOSApplication, args: argparse.Namespace) -> int:
    """Dispatch one CLI command against an initialized application."""
    api = app.api

    if args.command == 'status':
        return _print_response(api.get_sync_status())
    if args.command == 'seed':
        seeded = app.service.initialize_sample_data_if_needed()
        print("Sample data imported" if seeded else "Store already has data; nothing imported")
        return 0
    if args.command == 'reset':
        if not args.yes:
            print("Refusing to clear the cache without --yes", file=sys.stderr)
            return 1
        return _print_response(api.clear_offline_data())
    if args.command == 'items':
        return _print_response(api.get_active_items() if args.active else api.get_items())
    if args.command == 'orders':
        return _print_response(api.get_orders())
    if args.command == 'categories':
        return _print_response(api.get_categories())
    if args.command == 'users':
        return _print_response(api.get_users())
    if args.command == 'dashboard':
        return _print_response(api.get_dashboard_stats())
    if args.command == 'inventory':
        return _print_response(api.get_inventory_status())
    if args.command == 'sales':
        return _print_response(api.get_sales_analytics(group_by_day=args.by_day))
    if args.command == 'outbox':
        pending = app.service.get_pending_mutations()
        print(json.dumps([m.model_dump(mode="json") for m in pending], indent=2))
        return 0
    if args.command == 'audit':
        for entry in app.audit_logger.get_recent_logs(args.limit):
            print(AuditLog.model_validate(entry).to_readable_string())
        return 0
    if args.command == 'backup':
        app.store.backup(args.path)
        print(f"Backup written to {args.path}")
        return 0
    if args.command == 'vacuum':
        app.store.vacuum()
        print("Local store vacuumed")
        return 0

    print(f"Unknown command: {args.command}", file=sys.stderr)
    return 1


def create_store_key(config_dir: Optional[str] = None) -> int:
    """
    Store a new Fernet key in the credentials file and turn on encryption.

    Only databases created afterwards are encrypted; an existing plain store
    will not open with the key.
    """
    config = get_config_manager(config_dir)
    if config.has_credential("store_encryption_key"):
        print("A store encryption key already exists; refusing to replace it", file=sys.stderr)
        return 1

    config.set_store_encryption_key(generate_encryption_key().decode())
    config.set("database.encrypted", True)
    print("Store encryption key created; new databases will be encrypted")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code
    """
    args = build_parser().parse_args(argv)

    if args.command == 'keygen':
        return create_store_key(args.config_dir)

    # Seeding only happens through the explicit command or on a normal start.
    seed = False if args.no_seed or args.command in ('seed', 'reset') else None

    app = OfflinePOSApplication(config_dir=args.config_dir)
    if not app.initialize(seed=seed):
        print("ERROR: Application initialization failed; see logs/offline_pos.log", file=sys.stderr)
        return 1

    try:
        return run_command(app, args)
    except StoreError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        app.shutdown()


if __name__ == "__main__":
    sys.exit(main())
