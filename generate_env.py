#!/usr/bin/env python3
"""
Environment Configuration Generator for the back-office dashboard

Writes a .env file with:
- A cryptographically secure SECRET_KEY (session and API token signing)
- A random admin password
- Database, storage and workflow settings

Usage:
    python generate_env.py              # Interactive mode
    python generate_env.py --force      # Overwrite existing .env
    python generate_env.py --dev        # Development mode (predictable values)
"""

import argparse
from datetime import datetime
import os
from pathlib import Path
import secrets
import shutil
import string
import sys


class EnvGenerator:
    """Generate environment configuration"""

    def __init__(self, dev_mode=False):
        self.dev_mode = dev_mode
        self.env_file = Path(__file__).parent / '.env'

    def generate_secret_key(self, length=64):
        if self.dev_mode:
            return "dev-secret-key-DO-NOT-USE-IN-PRODUCTION"
        return secrets.token_hex(length)

    def generate_password(self, length=20):
        """
        Random password with at least one lowercase, uppercase, digit and symbol

        Symbols exclude characters that need quoting in .env files (#, =, quotes).
        """
        if self.dev_mode:
            return "admin987654321!"

        special = "!@$%^&*()_+-[]{}|;.,<>?"
        password = [
            secrets.choice(string.ascii_lowercase),
            secrets.choice(string.ascii_uppercase),
            secrets.choice(string.digits),
            secrets.choice(special),
        ]
        all_chars = string.ascii_letters + string.digits + special
        password.extend(secrets.choice(all_chars) for _ in range(length - len(password)))
        secrets.SystemRandom().shuffle(password)
        return ''.join(password)

    def create_env_content(self):
        secret_key = self.generate_secret_key()
        admin_password = self.generate_password()
        database_url = "sqlite:///instance/backoffice.db"

        content = f"""# Back-office dashboard environment configuration
# Generated: {datetime.now().strftime("%Y-%m-%d %H:%M:%S")}
#
# SECURITY WARNING: Keep this file secret! Never commit to version control!

# Flask
SECRET_KEY={secret_key}
FLASK_DEBUG={'True' if self.dev_mode else 'False'}
USE_RELOADER=False
FLASK_HOST=127.0.0.1
FLASK_PORT=5000
ENABLE_HTTPS={'False' if self.dev_mode else 'True'}

# Storage: 'sql' (DATABASE_URL) or 'memory' (in-process, lost on restart)
STORAGE_BACKEND=sql
DATABASE_URL={database_url}

# Admin account created on first build
ADMIN_USERNAME=admin
ADMIN_PASSWORD="{admin_password}"

# API tokens
TOKEN_MAX_AGE_SECONDS=86400
RATELIMIT_ENABLED=True

# Order workflow
# ORDER_STATUS_POLICY: 'free' (any status to any status) or 'strict' (completed/cancelled are terminal)
ORDER_STATUS_POLICY=free
DEFAULT_RESTOCK_QUANTITY=10

# Dashboard projections
NEW_CLIENT_WINDOW_DAYS=30
# REVENUE_WINDOW_DAYS=30   # unset = all-time revenue
RECENT_ORDERS_LIMIT=10
RECENT_ACTIVITY_LIMIT=10

# Logging
LOG_LEVEL=INFO
LOG_TO_FILE=True
LOG_DIR=logs
"""
        return content, {
            'secret_key': secret_key,
            'admin_password': admin_password,
            'database_url': database_url,
        }

    def create_backup(self):
        if not self.env_file.exists():
            return None
        stamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        backup_path = self.env_file.parent / f'.env.backup.{stamp}'
        shutil.copy2(self.env_file, backup_path)
        return backup_path

    def write_env_file(self, content):
        with open(self.env_file, 'w') as f:
            f.write(content)
        # Owner read/write only
        os.chmod(self.env_file, 0o600)

    def display_credentials(self, credentials):
        print("\n" + "=" * 80)
        print("GENERATED CREDENTIALS - SAVE THESE SECURELY!")
        print("=" * 80)
        print("\nThis is the ONLY time the admin password will be displayed.")
        print(f"\n   Admin username: admin")
        print(f"   Admin password: {credentials['admin_password']}")
        print(f"\n   Database: {credentials['database_url']}")
        print("\nNext steps:")
        print("   1. Run: python app.py --build-only  (create tables and admin user)")
        print("   2. Run: python app.py               (start the API)")
        print("   3. POST /api/auth/login to obtain a bearer token")
        if self.dev_mode:
            print("\nDEV MODE: predictable secrets. DO NOT use this configuration in production!")
        print("\n" + "=" * 80 + "\n")

    def generate(self, force=False):
        if self.env_file.exists() and not force:
            print(f"\nFile {self.env_file} already exists!")
            response = input("Do you want to overwrite it? (yes/no): ").lower().strip()
            if response not in ['yes', 'y']:
                print("Aborted. Existing .env file was not modified.")
                return False
            backup_path = self.create_backup()
            if backup_path:
                print(f"Backup created: {backup_path}")

        content, credentials = self.create_env_content()
        self.write_env_file(content)
        print(f"Created: {self.env_file}")
        self.display_credentials(credentials)
        return True


def main():
    parser = argparse.ArgumentParser(description='Generate .env configuration for the back-office dashboard')
    parser.add_argument('--force', '-f', action='store_true',
                        help='Overwrite existing .env file without prompting')
    parser.add_argument('--dev', '-d', action='store_true',
                        help='Development mode: use simple, predictable values (NOT FOR PRODUCTION!)')
    args = parser.parse_args()

    generator = EnvGenerator(dev_mode=args.dev)
    sys.exit(0 if generator.generate(force=args.force) else 1)


if __name__ == '__main__':
    main()
