"""Command module loading.

A command module is any Python module exposing ``setup(registrar)``.
The registrar carries the module's group explicitly; commands registered
through it without a group of their own land in that group.

Example module (``hello.py``)::

    def setup(registrar):
        @registrar.command("hello", help="Say Hello, hello(whom)")
        def hello(whom):
            registrar.message(f"Hello {whom}!")

Loading::

    load_module_dir(engine, Path("modules"))   # group = file/package name
"""

from __future__ import annotations

import importlib
import importlib.util
import logging
import sys
from collections.abc import Callable, Iterable
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING, Any

from cmdlets.command.registry import ALL_ARG_KINDS, CommandSpec, Initializer
from cmdlets.core.constants import MODULE_ENTRY_POINT
from cmdlets.core.errors import CmdletsError, ModuleLoadError
from cmdlets.core.types import ArgKind, Convention

if TYPE_CHECKING:
    from cmdlets.command.engine import Engine

logger = logging.getLogger(__name__)

# Loaded module files live under this prefix in sys.modules
_FILE_MODULE_PREFIX = "cmdlets_modules"


class ModuleRegistrar:
    """Registration handle passed to a module's setup().

    Attributes:
        engine: The engine the module is being loaded into.
        group: Default group for commands this module registers.
    """

    def __init__(self, engine: Engine, group: str) -> None:
        self.engine = engine
        self.group = group

    @property
    def config(self) -> dict[str, Any]:
        """This module's block from ``Config.modules`` (empty if absent)."""
        return self.engine.config.module_config(self.group)

    def command(
        self,
        name: str,
        run: Callable[..., Any] | None = None,
        *,
        help: str = "",
        group: str | None = None,
        hidden: bool = False,
        convention: Convention | None = None,
        init: Initializer | None = None,
        accepts: Iterable[ArgKind] | None = None,
    ) -> Any:
        """Register a command, or return a decorator when ``run`` is omitted.

        Returns:
            The stored CommandSpec, or (decorator form) the decorated
            function unchanged.
        """
        def register(fn: Callable[..., Any]) -> CommandSpec:
            return self.engine.registry.register(CommandSpec(
                name=name,
                run=fn,
                help=help,
                group=self.group if group is None else group,
                hidden=hidden,
                convention=convention,
                init=init,
                accepts=ALL_ARG_KINDS if accepts is None else frozenset(accepts),
            ))

        if run is not None:
            return register(run)

        def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
            register(fn)
            return fn

        return decorator

    # Output helpers, so modules don't need to reach into the engine
    def message(self, text: object) -> None:
        self.engine.reporter.message(text)

    def warning(self, text: object) -> None:
        self.engine.reporter.warning(text)

    def error(self, text: object) -> None:
        self.engine.reporter.error(text)


def load_module(engine: Engine, module: ModuleType | str, group: str | None = None) -> str:
    """Run a module's setup() against ``engine``.

    Args:
        engine: Target engine.
        module: Module object or dotted import path.
        group: Default group; the last component of the module name if None.

    Returns:
        The group the module was loaded under.

    Raises:
        ModuleLoadError: If the module cannot be imported, has no setup(),
            or setup() fails.
    """
    if isinstance(module, str):
        try:
            module = importlib.import_module(module)
        except ImportError as e:
            raise ModuleLoadError(f"cannot import command module {module!r}: {e}") from e

    group = group if group is not None else module.__name__.rpartition(".")[2]
    setup = getattr(module, MODULE_ENTRY_POINT, None)
    if not callable(setup):
        raise ModuleLoadError(
            f"command module {module.__name__!r} has no {MODULE_ENTRY_POINT}() function"
        )

    before = len(engine.registry)
    try:
        setup(ModuleRegistrar(engine, group))
    except CmdletsError:
        raise
    except Exception as e:
        raise ModuleLoadError(f"{module.__name__}.{MODULE_ENTRY_POINT}() failed: {e}") from e

    logger.debug("Loaded module %s as group %r (%d new commands)",
                 module.__name__, group, len(engine.registry) - before)
    return group


def load_module_file(engine: Engine, path: Path, group: str | None = None) -> str:
    """Import a module file (``x.py``) or package directory and load it.

    The group defaults to the file stem or directory name.
    """
    path = Path(path)
    if path.is_dir():
        init_file = path / "__init__.py"
        stem = path.name
        search = [str(path)]
    else:
        init_file = path
        stem = path.stem
        search = None

    if not init_file.is_file():
        raise ModuleLoadError(f"command module not found: {path}")

    module_name = f"{_FILE_MODULE_PREFIX}.{stem}"
    spec = importlib.util.spec_from_file_location(
        module_name, init_file, submodule_search_locations=search
    )
    if spec is None or spec.loader is None:
        raise ModuleLoadError(f"cannot load command module: {path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        sys.modules.pop(module_name, None)
        raise ModuleLoadError(f"error importing command module {path}: {e}") from e

    return load_module(engine, module, stem if group is None else group)


def load_module_dir(engine: Engine, directory: Path) -> list[str]:
    """Load every command module directly inside ``directory``, sorted by name.

    Picks up ``*.py`` files and package directories; names starting with
    ``_`` or ``.`` are skipped. A missing directory loads nothing.

    Returns:
        Groups loaded, in load order.
    """
    directory = Path(directory)
    if not directory.is_dir():
        logger.debug("Module directory not found: %s", directory)
        return []

    groups = []
    for entry in sorted(directory.iterdir()):
        if entry.name.startswith(("_", ".")):
            continue
        if entry.is_dir() and (entry / "__init__.py").is_file():
            groups.append(load_module_file(engine, entry))
        elif entry.is_file() and entry.suffix == ".py":
            groups.append(load_module_file(engine, entry))
    return groups
