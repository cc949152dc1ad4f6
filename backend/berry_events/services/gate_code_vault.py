"""AES-256-GCM sealing for property gate codes.

Ciphertext, IV and tag are stored as separate hex strings so the tag can be
verified explicitly on decrypt. Plaintext codes must never be logged.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..core.config import settings
from ..utils.errors import DecryptionError

logger = logging.getLogger(__name__)

IV_BYTES = 12
TAG_BYTES = 16
KEY_BYTES = 32


@dataclass(frozen=True)
class EncryptedGateCode:
    ciphertext: str
    iv: str
    auth_tag: str


def _decode_key(raw: str) -> bytes:
    if len(raw) == KEY_BYTES * 2:
        try:
            return bytes.fromhex(raw)
        except ValueError:
            pass
    try:
        key = base64.urlsafe_b64decode(raw + "=" * (-len(raw) % 4))
    except (binascii.Error, ValueError) as exc:
        raise ValueError("GATE_CODE_KEY must be 64 hex chars or base64 of 32 bytes") from exc
    if len(key) != KEY_BYTES:
        raise ValueError("GATE_CODE_KEY must decode to 32 bytes")
    return key


@lru_cache(maxsize=4)
def load_key(raw: Optional[str] = None, secret: Optional[str] = None) -> bytes:
    raw = (raw if raw is not None else settings.GATE_CODE_KEY).strip()
    if raw:
        return _decode_key(raw)
    logger.warning("GATE_CODE_KEY not set; deriving a development key from SECRET_KEY")
    return hashlib.sha256((secret or settings.SECRET_KEY).encode("utf-8")).digest()


def encrypt(plaintext: str, key: Optional[bytes] = None) -> EncryptedGateCode:
    key = key or load_key()
    iv = os.urandom(IV_BYTES)
    sealed = AESGCM(key).encrypt(iv, plaintext.encode("utf-8"), None)
    body, tag = sealed[:-TAG_BYTES], sealed[-TAG_BYTES:]
    return EncryptedGateCode(ciphertext=body.hex(), iv=iv.hex(), auth_tag=tag.hex())


def decrypt(ciphertext: str, iv: str, auth_tag: str, key: Optional[bytes] = None) -> str:
    key = key or load_key()
    try:
        nonce = bytes.fromhex(iv)
        tag = bytes.fromhex(auth_tag)
        body = bytes.fromhex(ciphertext)
        if len(nonce) != IV_BYTES or len(tag) != TAG_BYTES:
            raise ValueError("bad iv or tag length")
        return AESGCM(key).decrypt(nonce, body + tag, None).decode("utf-8")
    except (InvalidTag, ValueError, TypeError) as exc:
        # UnicodeDecodeError is a ValueError
        logger.error("Gate code failed authentication: %s", type(exc).__name__)
        raise DecryptionError() from exc
