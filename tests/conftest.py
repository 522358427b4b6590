"""Shared pytest fixtures and configuration for the phasekit test suite.

Guidelines
----------
* No real terminal interaction: questionary is always mocked.
* Coroutines are driven with :func:`asyncio.run`.
* Output assertions go through ``capsys``.
"""

from __future__ import annotations

from collections.abc import Iterator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest


@pytest.fixture
def answers() -> Iterator[list[str]]:
    """Queue of answers returned, in order, by the mocked text prompt."""
    queue: list[str] = []
    questionary_mod = MagicMock()
    questionary_mod.text.return_value.unsafe_ask_async = AsyncMock(
        side_effect=lambda: queue.pop(0),
    )
    with patch(
        "phasekit.cli.prompts._import_questionary",
        return_value=questionary_mod,
    ):
        yield queue
