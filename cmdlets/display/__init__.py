"""cmdlets display system.

Rich-based reporting sink for banners, menus and error dumps.
"""

from cmdlets.display.console import get_console, set_console
from cmdlets.display.reporter import Reporter
from cmdlets.display.theme import DEFAULT_THEME, Theme

__all__ = [
    "DEFAULT_THEME",
    "Reporter",
    "Theme",
    "get_console",
    "set_console",
]
