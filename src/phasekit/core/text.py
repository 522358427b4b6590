"""Pure text helpers shared by the instructions and header displays."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

_PLACEHOLDER = re.compile(r"\{\{\s*(\S*?)\s*\}\}")


def interpolate(text: str, data: Mapping[str, Any]) -> str:
    """Replace every ``{{ key }}`` in *text* with ``data[key]``.

    Whitespace around the key is ignored; the key itself may not
    contain whitespace.  Missing keys render as ``"None"``.
    """
    return _PLACEHOLDER.sub(lambda match: str(data.get(match.group(1))), text)
