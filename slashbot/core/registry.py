"""
Command Registry

Discovers command files on disk, resolves their definitions and builds
the name-keyed lookup table used by the dispatcher and deployer.

Layout of a commands directory::

    commands/
        ping.py            <- candidate
        utility/
            echo.py        <- candidate
            nested/...     <- never visited
        tooling/           <- reserved, skipped entirely

Traversal is fixed at two levels on purpose.
"""

import asyncio
import importlib.machinery
import importlib.util
import inspect
import sys
from collections.abc import Iterator, Mapping
from pathlib import Path
from types import ModuleType
from typing import Any

import structlog

from slashbot.core.diagnostics import Diagnostic, DiagnosticCode, DiagnosticLog
from slashbot.core.models import CommandDefinition, CommandModule, CommandUnit

logger = structlog.get_logger(__name__)

# Subdirectory holding helper modules rather than commands
DEFAULT_RESERVED_DIR = "tooling"

# sys.modules prefix for dynamically loaded command files
MODULE_NAMESPACE = "slashbot_commands"


class CommandDirectoryError(Exception):
    """Raised when the commands root itself cannot be read."""

    pass


class CommandRegistry(Mapping[str, CommandUnit]):
    """
    Read-only mapping of command name to CommandUnit.

    Built once; never mutated afterwards, so concurrent dispatches can
    read it without locking. Names are case-sensitive and iteration
    follows insertion order.
    """

    def __init__(self, units: list[CommandUnit] | None = None) -> None:
        self._units: dict[str, CommandUnit] = {}
        for unit in units or []:
            previous = self._units.get(unit.name)
            if previous is not None:
                # Last write wins
                logger.debug(
                    "Command replaced by later definition",
                    command=unit.name,
                    previous=str(previous.source),
                    replacement=str(unit.source),
                )
            self._units[unit.name] = unit

    def __getitem__(self, name: str) -> CommandUnit:
        return self._units[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._units)

    def __len__(self) -> int:
        return len(self._units)

    def __repr__(self) -> str:
        return f"<CommandRegistry(commands={list(self._units)!r})>"

    def names(self) -> list[str]:
        """List command names in insertion order."""
        return list(self._units)

    def definitions(self) -> list[CommandDefinition]:
        """List resolved definitions in insertion order."""
        return [unit.definition for unit in self._units.values()]

    def schemas(self) -> list[dict[str, Any]]:
        """Project every definition to its registration payload."""
        return [d.to_schema() for d in self.definitions()]


class CommandLoader:
    """
    Loads command files from a commands directory.

    Usage:
        loader = CommandLoader(Path("commands"))
        registry = await loader.load()
        for diagnostic in loader.diagnostics:
            print(diagnostic.code, diagnostic.source)
    """

    def __init__(
        self,
        root: Path,
        reserved_dir: str = DEFAULT_RESERVED_DIR,
        diagnostic_log: DiagnosticLog | None = None,
    ) -> None:
        self.root = Path(root)
        self.reserved_dir = reserved_dir
        self._log = (
            diagnostic_log if diagnostic_log is not None else DiagnosticLog(logger)
        )
        self.diagnostics: list[Diagnostic] = []

    def _emit(self, diagnostic: Diagnostic, exc: BaseException | None = None) -> None:
        self._log.record(diagnostic, exc_info=exc)
        self.diagnostics.append(diagnostic)

    def _list_py_files(self, directory: Path) -> list[Path]:
        return sorted(
            p for p in directory.iterdir()
            if p.is_file() and p.suffix == ".py" and not p.name.startswith("_")
        )

    def iter_candidates(self) -> list[Path]:
        """
        List candidate command files.

        Raises:
            CommandDirectoryError: If the root is missing or unreadable
        """
        if not self.root.exists():
            raise CommandDirectoryError(f"Commands directory not found: {self.root}")
        if not self.root.is_dir():
            raise CommandDirectoryError(f"Commands path is not a directory: {self.root}")

        try:
            candidates = self._list_py_files(self.root)
            folders = sorted(p for p in self.root.iterdir() if p.is_dir())
        except OSError as e:
            raise CommandDirectoryError(
                f"Cannot read commands directory {self.root}: {e}"
            ) from e

        for folder in folders:
            if folder.name == self.reserved_dir or folder.name.startswith(("_", ".")):
                continue
            try:
                candidates.extend(self._list_py_files(folder))
            except OSError as e:
                self._emit(
                    Diagnostic.error(
                        DiagnosticCode.COMMAND_LOAD_ERROR,
                        f"Cannot read command folder {folder}",
                        file_path=str(folder),
                        error=str(e),
                    ),
                    e,
                )

        return candidates

    def _register_namespace(self) -> None:
        """
        Expose the root as the ``slashbot_commands`` package.

        Command files can then reach helpers with relative imports, e.g.
        ``from ..tooling.text import truncate``. Modules left over from a
        previous load are dropped so each load sees its own root.
        """
        stale = [n for n in sys.modules if n.startswith(f"{MODULE_NAMESPACE}.")]
        for name in stale:
            del sys.modules[name]

        spec = importlib.machinery.ModuleSpec(MODULE_NAMESPACE, None, is_package=True)
        spec.submodule_search_locations = [str(self.root)]
        sys.modules[MODULE_NAMESPACE] = importlib.util.module_from_spec(spec)
        importlib.invalidate_caches()

    def _module_name(self, path: Path) -> str:
        relative = path.relative_to(self.root).with_suffix("")
        return ".".join([MODULE_NAMESPACE, *relative.parts])

    def _import(self, path: Path) -> ModuleType:
        """Import a command file as a standalone module."""
        module_name = self._module_name(path)
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot create import spec for {path}")

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(module_name, None)
            raise
        return module

    def _load_candidate(self, path: Path) -> CommandModule | None:
        """Import one file and check it exposes ``data`` and ``execute``."""
        try:
            module = self._import(path)
        except Exception as e:
            self._emit(
                Diagnostic.error(
                    DiagnosticCode.COMMAND_LOAD_ERROR,
                    f"Error loading command from {path}",
                    file_path=str(path),
                    error=str(e),
                    error_type=type(e).__name__,
                ),
                e,
            )
            return None

        if not isinstance(module, CommandModule) or not callable(module.execute):
            self._emit(
                Diagnostic.error(
                    DiagnosticCode.COMMAND_MISSING_PROPERTIES,
                    f'The command at {path} is missing a required "data" or "execute" property.',
                    file_path=str(path),
                )
            )
            return None

        return module

    async def _resolve(self, path: Path, module: CommandModule) -> CommandUnit:
        """Turn a module's ``data`` into a definition, running producers once."""
        data = module.data
        if callable(data):
            data = data()
            if inspect.isawaitable(data):
                data = await data
        definition = CommandDefinition.coerce(data)
        return CommandUnit(definition=definition, handler=module.execute, source=path)

    async def load(self) -> CommandRegistry:
        """
        Discover, validate and resolve all command files.

        Returns:
            Registry of every command that loaded cleanly

        Raises:
            CommandDirectoryError: If the root directory cannot be read
        """
        self.diagnostics = []
        candidates = self.iter_candidates()
        self._register_namespace()

        loaded: list[tuple[Path, CommandModule]] = []
        for path in candidates:
            module = self._load_candidate(path)
            if module is not None:
                loaded.append((path, module))

        # Producers only touch their own module, so they can run together
        results = await asyncio.gather(
            *(self._resolve(path, module) for path, module in loaded),
            return_exceptions=True,
        )

        units: list[CommandUnit] = []
        for (path, _), result in zip(loaded, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                self._emit(
                    Diagnostic.error(
                        DiagnosticCode.COMMAND_LOAD_ERROR,
                        f"Error loading command from {path}",
                        file_path=str(path),
                        error=str(result),
                        error_type=type(result).__name__,
                    ),
                    result,
                )
                continue
            units.append(result)

        registry = CommandRegistry(units)
        logger.info(
            "Command discovery complete",
            root=str(self.root),
            candidates=len(candidates),
            commands=len(registry),
            diagnostics=len(self.diagnostics),
        )
        return registry


async def discover(
    root: Path,
    reserved_dir: str = DEFAULT_RESERVED_DIR,
    diagnostic_log: DiagnosticLog | None = None,
) -> tuple[CommandRegistry, list[Diagnostic]]:
    """
    Build a registry from a commands directory.

    Individual bad files never abort the load; they are reported in the
    returned diagnostics instead.

    Args:
        root: Commands directory
        reserved_dir: Subdirectory name to skip (helper modules)
        diagnostic_log: Shared log to record diagnostics into

    Returns:
        (registry, diagnostics) for this load

    Raises:
        CommandDirectoryError: If the root directory cannot be read
    """
    loader = CommandLoader(root, reserved_dir=reserved_dir, diagnostic_log=diagnostic_log)
    registry = await loader.load()
    return registry, list(loader.diagnostics)
