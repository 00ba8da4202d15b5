# testdata.py
# Generate a sample parent DB with encrypted account codes for a dry run.

import sys
from datetime import datetime

import config
from secure_db import encrypt_field, save_document

# name -> plaintext code (None = account without a code)
SAMPLE_ACCOUNTS = {
    "MK": "ABC123",
    "HT": "X9-77-QP",
    "WP": None,
    "QW": "código-ñ",
}

SAMPLE_SETTINGS = {
    "cookies": None,
    "adminRoleId": "1001",
    "logChannelId": "2002",
    "muteBotMessages": False,
}


def build_parent_db(key, accounts=None):
    """Returns a parent DB document with codes encrypted under `key`"""
    accounts = SAMPLE_ACCOUNTS if accounts is None else accounts
    docs = []
    for name, code in accounts.items():
        doc = {
            "name": name,
            "targetServer": None,
            "pingEnabled": True,
            "status": "idle",
            "lastRun": datetime(2024, 1, 1).isoformat(),
        }
        if code is not None:
            doc[config.ENCRYPTED_FIELD] = encrypt_field(code, key)
        docs.append(doc)
    return {"accounts": docs, "settings": dict(SAMPLE_SETTINGS)}


def write_parent_db(path, key):
    db = build_parent_db(key)
    save_document(path, db)
    print(f"✅ Wrote {len(db['accounts'])} sample accounts to {path}")


if __name__ == "__main__":
    key = config.get_secret_key()
    if key is None:
        print(f"❌ Set {config.SECRET_KEY_ENV} first.")
        sys.exit(config.EXIT_MISSING_KEY)
    write_parent_db(config.PARENT_DB_PATH, key)
