"""
Decoding of uploaded CSV bytes to text.

Rules:
- Detect encoding best-effort via charset-normalizer.
- If detection is uncertain, still attempt decode using best guess.
- If decode fails, fall back to UTF-8, then to the best guess with replacement characters.
- Newlines are left alone; the parser's newline setting applies to the decoded text.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from charset_normalizer import from_bytes


logger = logging.getLogger(__name__)

UTF8_BOM = b"\xef\xbb\xbf"


def decode_csv_bytes(raw: bytes) -> tuple[str, Dict[str, Any]]:
    detected = None

    match = from_bytes(raw).best()
    if match is not None:
        detected = match.encoding

    decode_used = detected or "utf-8"
    # Decode UTF-8 with a BOM as utf-8-sig so the BOM doesn't end up in the first field name
    if raw.startswith(UTF8_BOM) and decode_used.lower().replace("-", "_") in ("utf_8", "utf8"):
        decode_used = "utf-8-sig"

    decode_fallback = False

    try:
        text = raw.decode(decode_used)
    except (UnicodeDecodeError, LookupError):
        try:
            text = raw.decode("utf-8")
            decode_used = "utf-8"
            decode_fallback = True
        except UnicodeDecodeError:
            # Last resort: decode with replacement so parsing can still proceed
            text = raw.decode("utf-8", errors="replace")
            decode_used = "utf-8"
            decode_fallback = True

    if decode_fallback:
        logger.warning("Decoding fell back to %s (detected %s)", decode_used, detected)

    report = {
        "detected": detected,
        "decode_used": decode_used,
        "decode_fallback": decode_fallback,
    }
    return text, report
