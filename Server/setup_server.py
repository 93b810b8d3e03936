#!/usr/bin/env python3
"""
OrgAdmin Server - Setup Script

This script initializes the OrgAdmin server for deployment:
1. Creates config.json with defaults and a generated JWT secret
2. Creates the database schema
3. Populates default roles, permissions and the root organization
4. Creates the default admin user

Usage:
    python setup_server.py [--config PATH] [--yes]
"""

import argparse
import sys
from pathlib import Path

# Ensure we can import from the same directory
sys.path.insert(0, str(Path(__file__).parent))

from managers.config_manager import ConfigManager
from managers.database_manager import DatabaseManager


def print_header():
    """Print script header"""
    print("=" * 70)
    print("OrgAdmin Server - Setup Script")
    print("=" * 70)
    print()


def print_section(title):
    """Print section header"""
    print()
    print("-" * 70)
    print(f"  {title}")
    print("-" * 70)


def initialize_config(config_path):
    """
    Load or create the server configuration

    Args:
        config_path: Path to config.json, or None for the working directory

    Returns:
        ConfigManager: Loaded configuration
    """
    print_section("Configuration")

    config_manager = ConfigManager(config_path)
    existed = config_manager.config_file.exists()
    config_manager.load_config()

    if existed:
        print(f"[OK] Configuration found at: {config_manager.config_file.absolute()}")
    else:
        config_manager.save_config()
        print(f"-> Created configuration at: {config_manager.config_file.absolute()}")

    return config_manager


def initialize_database(config_manager):
    """
    Initialize the database with schema and default data

    Args:
        config_manager: Loaded ConfigManager

    Returns:
        str or None: Admin password if created, None otherwise
    """
    print_section("Database Initialization")

    database_url = config_manager.get("database_url")
    print(f"-> Using database: {database_url}")
    print()

    try:
        db_manager = DatabaseManager(database_url)
        admin_password = db_manager.InitializeDatabase()
        print("[OK] Database initialization complete!")
        return admin_password

    except Exception as e:
        print(f"[ERROR] Database initialization failed: {str(e)}")
        raise


def print_admin_credentials(password):
    """
    Print admin credentials prominently

    Args:
        password: Generated admin password
    """
    print()
    print("!" * 70)
    print("!  IMPORTANT: SAVE THESE CREDENTIALS - PASSWORD SHOWN ONLY ONCE!  !")
    print("!" * 70)
    print()
    print("  Admin Login ID: admin")
    print(f"  Admin Password: {password}")
    print()
    print("  -> Change it with POST /sys/user/ after your first login")


def main(argv=None):
    """Main setup script entry point"""
    parser = argparse.ArgumentParser(description="Initialize the OrgAdmin server")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.json")
    parser.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    args = parser.parse_args(argv)

    print_header()

    if not args.yes:
        try:
            response = input("Continue with setup? (Y/n): ")
            if response.lower() == 'n':
                print("\nSetup cancelled.")
                sys.exit(0)
        except KeyboardInterrupt:
            print("\n\nSetup cancelled.")
            sys.exit(0)

    config_manager = initialize_config(args.config)

    try:
        admin_password = initialize_database(config_manager)
    except Exception:
        print("\n[ERROR] Setup failed during database initialization")
        sys.exit(1)

    print()
    print("=" * 70)
    print("[OK] OrgAdmin Server Setup Complete!")
    print("=" * 70)

    if admin_password:
        print_admin_credentials(admin_password)
    else:
        print()
        print("  Database already contained users - no new admin account created.")
        print()

    print("Start the server with:  python server.py")
    print()


if __name__ == "__main__":
    main()
