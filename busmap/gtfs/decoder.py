"""
Byte-to-text decoding for feed tables.

Japanese operators still publish tables in Shift_JIS, so anything that is not
valid UTF-8 is decoded as cp932 (the Windows superset of Shift_JIS).
"""

import codecs

LEGACY_ENCODING = "cp932"


def decode_table(data: bytes) -> str:
    """
    Decode the raw bytes of a feed table.

    Tries strict UTF-8 first and falls back to cp932. The fallback replaces
    unmapped bytes instead of failing, so it never raises for legacy input.
    A leading byte-order mark is removed whichever path was taken.

    Args:
        data: Raw table bytes as stored in the archive

    Returns:
        Decoded table text
    """
    if data.startswith(codecs.BOM_UTF8):
        data = data[len(codecs.BOM_UTF8):]

    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        text = data.decode(LEGACY_ENCODING, errors="replace")

    # A BOM can also survive as U+FEFF after decoding
    return text.lstrip("\ufeff")
