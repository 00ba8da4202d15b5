#!/usr/bin/env python3
"""
One-shot migration of the parent account DB into the local DB.

Each account's `encryptedCode` (CryptoJS AES passphrase format) is decrypted
and stored in plaintext under `code`; every other account field and the
`settings` object are copied through unchanged.
"""
import os
import sys
import logging

import config
from secure_db import decrypt_field, load_document, save_document

logger = logging.getLogger("migrate_db")


class MigrationError(Exception):
    pass


def migrate_account(account: dict, key: str) -> dict:
    migrated = {k: v for k, v in account.items() if k != config.ENCRYPTED_FIELD}
    name = account.get("name")

    ciphertext = account.get(config.ENCRYPTED_FIELD)
    plain = decrypt_field(ciphertext, key) if ciphertext else None

    if plain is None:
        if ciphertext:
            logger.warning(f"⚠️ Could not decrypt code for {name}. Keeping empty.")
        else:
            logger.warning(f"⚠️ No encrypted code for {name}. Keeping empty.")
        plain = ""
    elif plain == "":
        logger.debug(f"Code for {name} decrypted to an empty string")

    migrated[config.PLAINTEXT_FIELD] = plain
    return migrated


def migrate_document(document: dict, key: str) -> dict:
    accounts = document.get("accounts")
    if not isinstance(accounts, list):
        raise MigrationError(f"'accounts' must be a list, got {type(accounts).__name__}")

    logger.info(f"📥 Loaded DB with {len(accounts)} accounts.")

    migrated = {"accounts": [migrate_account(acc, key) for acc in accounts]}
    # absent settings stay absent, as JSON.stringify drops undefined
    if "settings" in document:
        migrated["settings"] = document["settings"]
    return migrated


def migrate(source_path, dest_path, key) -> int:
    try:
        if not os.path.exists(source_path):
            logger.error(f"❌ Parent DB not found at {source_path}")
            return config.EXIT_MISSING_SOURCE
        if key is None:
            logger.error(f"🔑 Secret key missing: set {config.SECRET_KEY_ENV} in the environment")
            return config.EXIT_MISSING_KEY

        document = load_document(source_path)
        migrated = migrate_document(document, key)
        save_document(dest_path, migrated)
        logger.info(f"✅ [SUCCESS] Migrated DB saved to {dest_path}")
        return config.EXIT_OK
    except Exception as e:
        logger.error(f"❌ Migration failed: {e}", exc_info=True)
        return config.EXIT_MIGRATION_FAILED


def main() -> int:
    logging.basicConfig(format=config.LOG_FORMAT, level=logging.INFO)
    return migrate(config.PARENT_DB_PATH, config.TARGET_DB_PATH, config.get_secret_key())


if __name__ == "__main__":
    sys.exit(main())
