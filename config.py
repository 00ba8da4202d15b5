# config.py
import os

# Parent database (source) and local database (destination)
PARENT_DB_PATH    = os.getenv("PARENT_DB_PATH", "../db.json")
TARGET_DB_PATH    = os.getenv("TARGET_DB_PATH", "db.json")

# Environment variable holding the AES passphrase (never hard-code it here)
SECRET_KEY_ENV    = "MIGRATION_SECRET_KEY"

# Account fields
ENCRYPTED_FIELD   = "encryptedCode"
PLAINTEXT_FIELD   = "code"

JSON_INDENT       = 2

# Process exit codes
EXIT_OK               = 0
EXIT_MISSING_SOURCE   = 1
EXIT_MIGRATION_FAILED = 2
EXIT_MISSING_KEY      = 3

LOG_FORMAT        = "%(asctime)s — %(name)s — %(levelname)s — %(message)s"


def get_secret_key():
    key = os.getenv(SECRET_KEY_ENV, "").strip()
    return key or None
