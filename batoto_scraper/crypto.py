"""
Secret recovery for V2 chapter pages.

``batoPass`` is a JSFuck-style expression that evaluates to the AES password,
``batoWord`` is a CryptoJS ``AES.encrypt(text, password)`` payload: base64 of
``Salted__`` + 8 byte salt + AES-256-CBC ciphertext, key and IV derived with
OpenSSL's MD5 ``EVP_BytesToKey``.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import os
import re
from typing import Optional, Tuple

from Crypto.Cipher import AES
from Crypto.Util.Padding import pad, unpad

from .errors import DecodeError

SALT_HEADER = b"Salted__"
KEY_SIZE = 32
IV_SIZE = 16

_DIGIT_TOKEN_RE = re.compile(r"!\+\[\]")
_ZERO_TOKEN_RE = re.compile(r"\+\[\]")


# ---------------------------
# Deobfuscation
# ---------------------------
def _matching_bracket(text: str, opening_index: int) -> int:
    opening = text[opening_index]
    closing = "]" if opening == "[" else ")"
    depth = 0
    for idx in range(opening_index, len(text)):
        ch = text[idx]
        if ch == opening:
            depth += 1
        elif ch == closing:
            depth -= 1
        if depth == 0:
            return idx
        if depth < 0:
            return -1
    return -1


def _digit(group: str) -> str:
    # +[] -> 0, +!+[] -> 1, !+[]+!+[] -> 2 ... the count of !+[] is the digit
    count = len(_DIGIT_TOKEN_RE.findall(group))
    if count == 0:
        if len(_ZERO_TOKEN_RE.findall(group)) == 1:
            return "0"
    elif 1 <= count <= 9:
        return str(count)
    return "-"


def deobfuscate_js_password(program: str) -> str:
    """
    Evaluate the digit/dot program used for ``batoPass``.

    Each top level ``[...]`` group yields one digit and each ``(...)`` group
    yields a ``.``; an index applied to a parenthesised group is skipped.
    """
    out = []
    idx = 0
    while idx < len(program):
        ch = program[idx]
        if ch not in "[(":
            idx += 1
            continue
        closing = _matching_bracket(program, idx)
        if closing < 0:
            raise DecodeError(f"Unbalanced bracket at offset {idx} in password program")
        if ch == "[":
            out.append(_digit(program[idx:closing + 1]))
        else:
            out.append(".")
            if closing + 1 < len(program) and program[closing + 1] == "[":
                skip = _matching_bracket(program, closing + 1)
                if skip < 0:
                    raise DecodeError(f"Unbalanced bracket at offset {closing + 1} in password program")
                idx = skip + 1
                continue
        idx = closing + 1
    return "".join(out)


# ---------------------------
# AES (CryptoJS / OpenSSL format)
# ---------------------------
def evp_bytes_to_key(password: bytes, salt: bytes, key_len: int = KEY_SIZE, iv_len: int = IV_SIZE) -> Tuple[bytes, bytes]:
    derived = b""
    block = b""
    while len(derived) < key_len + iv_len:
        block = hashlib.md5(block + password + salt).digest()
        derived += block
    return derived[:key_len], derived[key_len:key_len + iv_len]


def decrypt_aes(cipher_b64: str, password: str) -> str:
    try:
        raw = base64.b64decode(cipher_b64.strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Encrypted blob is not valid base64: {e}") from e
    if not raw.startswith(SALT_HEADER) or len(raw) < 16 + AES.block_size:
        raise DecodeError("Encrypted blob is missing the Salted__ header")
    salt, body = raw[8:16], raw[16:]
    if len(body) % AES.block_size:
        raise DecodeError("Encrypted blob length is not a multiple of the AES block size")
    key, iv = evp_bytes_to_key(password.encode("utf-8"), salt)
    try:
        plain = unpad(AES.new(key, AES.MODE_CBC, iv).decrypt(body), AES.block_size)
        return plain.decode("utf-8")
    except (ValueError, UnicodeDecodeError) as e:
        raise DecodeError(f"Decryption failed, wrong password? ({e})") from e


def encrypt_aes(plain_text: str, password: str, salt: Optional[bytes] = None) -> str:
    salt = salt if salt is not None else os.urandom(8)
    key, iv = evp_bytes_to_key(password.encode("utf-8"), salt)
    body = AES.new(key, AES.MODE_CBC, iv).encrypt(pad(plain_text.encode("utf-8"), AES.block_size))
    return base64.b64encode(SALT_HEADER + salt + body).decode("ascii")
