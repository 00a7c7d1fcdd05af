"""
V2 page decode pipeline.

The chapter page ships three constants in one script::

    const imgHttps = ["https://.../1.webp", ...];
    const batoPass = <obfuscated expression>;
    const batoWord = "<CryptoJS AES blob>";

Recovering the password and using it are separate steps so either half can
be replaced without touching the other.
"""

from __future__ import annotations

import json
import re
from typing import Callable, List, Optional, Sequence, Tuple

from . import crypto
from .errors import DecodeError, ParseError
from .log import logger
from .models import PageItem

IMAGES_CONST = "imgHttps"
PASSWORD_CONST = "batoPass"
CIPHER_CONST = "batoWord"

Deobfuscator = Callable[[str], str]
Decryptor = Callable[[str, str], str]


def extract_constant(script: str, name: str) -> str:
    match = re.search(rf"\bconst\s+{re.escape(name)}\s*=", script)
    if match is None:
        raise ParseError(name)
    start = match.end()
    end = script.find(";", start)
    value = script[start:] if end < 0 else script[start:end]
    return value.strip()


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def _string_array(text: str) -> Optional[List[str]]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, list) or not all(isinstance(x, str) for x in data):
        return None
    return data


def decode_page_tokens(
    script: str,
    deobfuscate: Deobfuscator = crypto.deobfuscate_js_password,
    decrypt: Decryptor = crypto.decrypt_aes,
) -> List[Tuple[str, Optional[str]]]:
    images = _string_array(extract_constant(script, IMAGES_CONST))
    if images is None:
        raise ParseError(IMAGES_CONST, f"{IMAGES_CONST} is not an array of strings")
    cipher_text = _unquote(extract_constant(script, CIPHER_CONST))
    password_program = extract_constant(script, PASSWORD_CONST)

    try:
        password = deobfuscate(password_program)
        plain = decrypt(cipher_text, password)
    except DecodeError:
        raise
    except Exception as e:
        raise DecodeError(f"Could not recover page access tokens: {e}") from e

    tokens = _string_array(plain)
    if tokens is None:
        raise DecodeError("Decrypted access token list is not an array of strings")
    if len(tokens) < len(images):
        logger.debug("Only %d access tokens for %d images", len(tokens), len(images))
    return [(url, tokens[i] if i < len(tokens) else None) for i, url in enumerate(images)]


def build_page_items(pairs: Sequence[Tuple[str, Optional[str]]]) -> List[PageItem]:
    return [
        PageItem(index=i, image_url=f"{url}?{token}" if token else url)
        for i, (url, token) in enumerate(pairs)
    ]
