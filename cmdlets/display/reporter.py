"""Reporting sink: banners, menus, timing and error dumps.

The engine never formats output itself; every human-facing line goes
through a Reporter. Text is wrapped in ``rich.text.Text`` so command
output is never interpreted as markup.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import TYPE_CHECKING

from rich.console import Console
from rich.text import Text

from cmdlets.display.console import get_console
from cmdlets.display.theme import DEFAULT_THEME, Theme

if TYPE_CHECKING:
    from cmdlets.command.error_log import ErrorLog
    from cmdlets.command.registry import CommandSpec


class Reporter:
    """Renders engine events to a Rich console.

    Example:
        reporter = Reporter()
        reporter.pre_run_title("[add]: addition")
        reporter.success("add: done!")
        reporter.chain_summary("add(2,3)", None, elapsed=0.002)
    """

    def __init__(self, console: Console | None = None, theme: Theme | None = None) -> None:
        self._console = console
        self.theme = theme or DEFAULT_THEME

    @property
    def console(self) -> Console:
        """The target console (the shared one unless set explicitly)."""
        return self._console or get_console()

    def _line(self, text: object, style: str) -> None:
        self.console.print(Text(str(text), style=style))

    # === Messages ===

    def message(self, text: object) -> None:
        self._line(text, self.theme.message)

    def warning(self, text: object) -> None:
        self._line(text, self.theme.warning)

    def error(self, text: object) -> None:
        self._line(text, self.theme.error)

    def success(self, text: object) -> None:
        self._line(text, self.theme.success)

    def pre_run_title(self, text: object) -> None:
        self._line(text, self.theme.pre_run_title)

    def post_run_title(self, text: object) -> None:
        self._line(text, self.theme.post_run_title)

    def timing(self, label: str, elapsed: float) -> None:
        """Print elapsed wall time for a chain (seconds in, milliseconds out)."""
        self._line(f"{label}: {elapsed * 1000:.3f}ms", self.theme.timing)

    # === Run summaries ===

    def batch_title(self, token: str) -> None:
        self.pre_run_title(f"Running Batch Serial Cmds [{token}]...")

    def command_title(self, spec: CommandSpec) -> None:
        self.pre_run_title(f"[{spec.name}]: {spec.help}")

    def chain_summary(
        self,
        label: str,
        error: BaseException | None,
        *,
        elapsed: float,
        hidden: bool = False,
    ) -> None:
        """Print the post-run banner for one chain.

        Failures are always shown. Success banners and timing are
        suppressed for hidden single commands.
        """
        if error is not None:
            self.post_run_title(f"[{label}]: err = {error}")
        elif not hidden:
            self.post_run_title(f"[{label}]: OK")
        if not hidden:
            self.timing(label, elapsed)

    def error_dump(self, error_log: ErrorLog) -> None:
        """Print every recorded error, grouped by command, in insertion order."""
        for name, errors in error_log.items():
            self.error(f"{name}: errors [ {len(errors)}]")
            for i, err in enumerate(errors):
                self.error(f"[{i}]: {err}")

    # === Menus ===

    def menu(
        self,
        groups: Mapping[str, Sequence[CommandSpec]],
        *,
        show_hidden: bool,
        prog: str = "cmdlets",
    ) -> None:
        """Print the top-level menu: every group, sorted by group name."""
        self._line(f"Format:  {prog} [cmd1, cmd2, ...]\n", self.theme.menu_header)
        self._line("Available commands are:", self.theme.menu_header)
        for group in sorted(groups):
            self.group_menu(group, groups[group], show_hidden=show_hidden)

    def group_menu(
        self,
        group: str,
        specs: Iterable[CommandSpec],
        *,
        show_hidden: bool,
    ) -> None:
        """Print one group's commands, sorted by name. Empty groups print nothing."""
        visible = sorted(
            (s for s in specs if show_hidden or not s.hidden),
            key=lambda s: s.name,
        )
        if not visible:
            return
        self.console.print()
        self._line(f"[{group}]", self.theme.menu_group)
        for spec in visible:
            self.console.print(Text.assemble(
                "    ",
                (spec.name, self.theme.menu_name),
                ": ",
                (spec.help, self.theme.menu_help),
            ))
