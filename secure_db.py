import os
import base64
import json
import logging
import shutil
import tempfile
from tinydb.storages import JSONStorage
from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

import config

SALT_HEADER = b"Salted__"
SALT_SIZE = 8
KEY_SIZE = 32
IV_SIZE = 16
BLOCK_BITS = 128
NEW_FILE_MODE = 0o666

logger = logging.getLogger("secure_db")
logger.setLevel(logging.INFO)


class DecryptionError(ValueError):
    pass


# ===== Cipher: CryptoJS AES.encrypt(text, passphrase) compatible =====

def derive_key_iv(passphrase: bytes, salt: bytes):
    """OpenSSL EVP_BytesToKey with MD5 and a single iteration."""
    derived = b""
    block = b""
    while len(derived) < KEY_SIZE + IV_SIZE:
        digest = hashes.Hash(hashes.MD5())
        digest.update(block + passphrase + salt)
        block = digest.finalize()
        derived += block
    return derived[:KEY_SIZE], derived[KEY_SIZE:KEY_SIZE + IV_SIZE]


def _decrypt(ciphertext: str, key: str) -> str:
    raw = base64.b64decode(ciphertext.encode("ascii"))
    if len(raw) < len(SALT_HEADER) + SALT_SIZE or not raw.startswith(SALT_HEADER):
        raise DecryptionError("Ciphertext has no OpenSSL salt header")
    salt = raw[len(SALT_HEADER):len(SALT_HEADER) + SALT_SIZE]
    body = raw[len(SALT_HEADER) + SALT_SIZE:]

    aes_key, iv = derive_key_iv(key.encode("utf-8"), salt)
    decryptor = Cipher(algorithms.AES(aes_key), modes.CBC(iv)).decryptor()
    padded = decryptor.update(body) + decryptor.finalize()

    unpadder = padding.PKCS7(BLOCK_BITS).unpadder()
    plain = unpadder.update(padded) + unpadder.finalize()
    return plain.decode("utf-8")


def decrypt_field(ciphertext: str, key: str):
    """
    Decrypt one field value. Returns the plaintext (may be ""),
    or None if the cipher layer rejected the input.
    """
    try:
        return _decrypt(ciphertext, key)
    except Exception as e:
        logger.error(f"🔒 Decryption error: {e}")
        return None


def encrypt_field(plaintext: str, key: str, salt: bytes = None) -> str:
    if salt is None:
        salt = os.urandom(SALT_SIZE)
    if len(salt) != SALT_SIZE:
        raise ValueError(f"Salt must be {SALT_SIZE} bytes, got {len(salt)}")

    aes_key, iv = derive_key_iv(key.encode("utf-8"), salt)
    padder = padding.PKCS7(BLOCK_BITS).padder()
    padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()
    encryptor = Cipher(algorithms.AES(aes_key), modes.CBC(iv)).encryptor()
    body = encryptor.update(padded) + encryptor.finalize()
    return base64.b64encode(SALT_HEADER + salt + body).decode("ascii")


# ===== JSON document storage =====

class JSONDocumentStorage(JSONStorage):
    """Whole-document JSON file, pretty-printed like JSON.stringify(doc, null, 2)."""

    def __init__(self, path, access_mode="r+", **kwargs):
        kwargs.setdefault("indent", config.JSON_INDENT)
        kwargs.setdefault("ensure_ascii", False)
        super().__init__(path, encoding="utf-8", access_mode=access_mode, **kwargs)

    def write(self, data):
        serialized = json.dumps(data, **self.kwargs)
        # lone surrogates are not encodable; write them as \uXXXX escapes
        serialized = serialized.encode("utf-8", "backslashreplace").decode("utf-8")
        self._handle.seek(0)
        self._handle.write(serialized)
        self._handle.flush()
        os.fsync(self._handle.fileno())
        self._handle.truncate()


def load_document(path) -> dict:
    storage = JSONDocumentStorage(path, access_mode="r")
    try:
        data = storage.read()
    finally:
        storage.close()
    if data is None:
        raise ValueError(f"DB file is empty: {path}")
    if not isinstance(data, dict):
        raise ValueError(f"DB file must hold a JSON object, got {type(data).__name__}")
    logger.info(f"📂 Loaded DB from {path}")
    return data


def _current_umask():
    mask = os.umask(0)
    os.umask(mask)
    return mask


def save_document(path, document: dict):
    """Write to a temp file next to `path`, then move it into place."""
    target_dir = os.path.dirname(os.path.abspath(path))
    fd, tmp_path = tempfile.mkstemp(prefix=".migrate-", suffix=".json", dir=target_dir)
    os.close(fd)
    try:
        storage = JSONDocumentStorage(tmp_path)
        try:
            storage.write(document)
        finally:
            storage.close()
        if os.path.exists(path):
            shutil.copymode(path, tmp_path)
        else:
            os.chmod(tmp_path, NEW_FILE_MODE & ~_current_umask())
        os.replace(tmp_path, path)
    except Exception as e:
        logger.error(f"❌ Failed to write DB: {e}")
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise
    logger.info(f"💾 DB written to {path}")
