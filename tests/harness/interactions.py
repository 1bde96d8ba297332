"""Pilot wrappers with settling for Textual in-process tests.

Thin wrappers that add await pilot.pause() after each interaction,
waiting for CPU idle instead of fixed sleeps.
"""

from textual.pilot import Pilot


async def press_and_settle(pilot: Pilot, *keys: str) -> None:
    """Press keys in order and wait for app to settle."""
    await pilot.press(*keys)
    await pilot.pause()


async def press_sequence(pilot: Pilot, keys: list[str]) -> None:
    """Press keys one at a time, settling after each."""
    for key in keys:
        await pilot.press(key)
        await pilot.pause()


async def type_text(pilot: Pilot, text: str) -> None:
    """Type printable characters into the focused field."""
    await press_sequence(pilot, list(text))


async def resize_and_settle(pilot: Pilot, width: int, height: int) -> None:
    """Resize terminal and wait for app to settle."""
    await pilot.resize_terminal(width, height)
    await pilot.pause()
