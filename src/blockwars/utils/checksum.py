import zlib
from typing import Optional


def crc32_hex(text: Optional[str]) -> str:
    """Uppercase, zero-padded CRC-32 of the low byte of each character."""
    if not text:
        return "00000000"
    data = bytes(ord(ch) & 0xFF for ch in text)
    return format(zlib.crc32(data) & 0xFFFFFFFF, "08X")
