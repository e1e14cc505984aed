"""Theme definitions for cmdlets output."""

from dataclasses import dataclass


@dataclass
class Theme:
    """Visual theme configuration.

    All styling in one place for easy customization. Values are Rich
    style strings.
    """

    message: str = ""
    warning: str = "yellow"
    error: str = "red"
    success: str = "bold red on green"
    pre_run_title: str = "bold magenta"
    post_run_title: str = "white on blue"
    timing: str = "dim"

    # Menu
    menu_header: str = "bold"
    menu_group: str = "white on blue"
    menu_name: str = "yellow"
    menu_help: str = "green"


DEFAULT_THEME = Theme()
