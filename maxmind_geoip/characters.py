import re
from typing import Optional

_NON_PRINTABLE_ASCII = re.compile(r"[^\x20-\x7e]")


def to_ascii(value: Optional[str]) -> Optional[str]:
    """Drop every character outside printable ASCII (0x20-0x7E)"""
    if not value:
        return value
    return _NON_PRINTABLE_ASCII.sub("", value)
