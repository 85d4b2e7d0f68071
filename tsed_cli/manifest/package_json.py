"""In-memory model of the project's ``package.json``.

The model keeps the whole file as one ordered ``dict`` (unknown top-level
fields are preserved) and tracks two dirty flags:

* ``rewrite`` -- the on-disk file is out of date and must be written;
* ``reinstall`` -- dependencies changed and the package manager must run.

``install()`` writes the file, runs the selected package manager and finally
re-reads ``package.json`` so the model reflects what was actually installed.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from types import ModuleType
from typing import Any

from ..config import CliConfig, InstallOptions
from ..tasks import Task, TaskList, TaskResult
from ..utils import CommandError, CommandResult, CommandRunner, find_package_json, import_module
from .package_managers import get_package_manager
from .versions import partition_valid, sort_keys, substitute_version

DEPENDENCY_KEYS = ("dependencies", "devDependencies", "peerDependencies")


def empty_package_json(config: CliConfig) -> dict[str, Any]:
    return {
        "name": config.name,
        "version": "1.0.0",
        "description": "",
        "scripts": {},
        "dependencies": {},
        "devDependencies": {},
    }


def _use_read_pkg_up(config: CliConfig) -> bool:
    # ``init`` in an empty directory must not pick up a parent project
    return not (config.command == "init" and not config.package_json_path.exists())


def read_package_json(config: CliConfig) -> dict[str, Any]:
    """Load the closest ``package.json`` merged over the default shape.

    Updates ``config.project_root`` with the directory of the file found.
    """
    if _use_read_pkg_up(config):
        found = find_package_json(config.root_dir)
        if found is not None:
            path, data = found
            config.project_root = path.parent
            return {**empty_package_json(config), **data}

    return empty_package_json(config)


class ProjectPackageJson:
    """The ``package.json`` of the project the CLI operates on."""

    def __init__(self, config: CliConfig, runner: CommandRunner | None = None) -> None:
        self.config = config
        self.runner = runner or CommandRunner()
        self.rewrite = False
        self.reinstall = False
        self.raw: dict[str, Any] = empty_package_json(config)
        self.read()

    # ------------------------------------------------------------------
    # Location
    # ------------------------------------------------------------------

    @property
    def dir(self) -> Path:
        return Path(self.config.root_dir)

    @dir.setter
    def dir(self, directory: str | Path) -> None:
        self.config.root_dir = Path(directory)
        self.read()

    @property
    def path(self) -> Path:
        return self.dir / "package.json"

    # ------------------------------------------------------------------
    # Typed accessors
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self.raw.get("name", "")

    @name.setter
    def name(self, name: str) -> None:
        self.raw["name"] = name
        self.rewrite = True

    @property
    def version(self) -> str:
        return self.raw.get("version", "")

    @property
    def description(self) -> str:
        return self.raw.get("description", "")

    @property
    def scripts(self) -> dict[str, str]:
        return self._section("scripts")

    @property
    def dependencies(self) -> dict[str, str]:
        return self._section("dependencies")

    @property
    def dev_dependencies(self) -> dict[str, str]:
        return self._section("devDependencies")

    @property
    def all_dependencies(self) -> dict[str, str]:
        """Runtime and dev dependencies; a dev entry wins over a runtime one."""
        return {**self.dependencies, **self.dev_dependencies}

    def _section(self, key: str) -> dict[str, Any]:
        section = self.raw.get(key)
        if not isinstance(section, dict):
            section = {}
            self.raw[key] = section
        return section

    def to_json(self) -> dict[str, Any]:
        return self.raw

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    def _scope(self, scope: Mapping[str, Any] | None) -> dict[str, Any]:
        return {"tsedVersion": self.config.tsed_version, **(scope or {})}

    def add_dependency(
        self, name: str, version: str | None = None, scope: Mapping[str, Any] | None = None
    ) -> "ProjectPackageJson":
        self.dependencies[name] = substitute_version(version, self._scope(scope))
        self.reinstall = True
        self.rewrite = True
        return self

    def add_dependencies(
        self, modules: Mapping[str, str | None], scope: Mapping[str, Any] | None = None
    ) -> "ProjectPackageJson":
        for name, version in modules.items():
            self.add_dependency(name, version, scope)
        return self

    def add_dev_dependency(
        self, name: str, version: str | None = None, scope: Mapping[str, Any] | None = None
    ) -> "ProjectPackageJson":
        self.dev_dependencies[name] = substitute_version(version, self._scope(scope))
        self.reinstall = True
        self.rewrite = True
        return self

    def add_dev_dependencies(
        self, modules: Mapping[str, str | None], scope: Mapping[str, Any] | None = None
    ) -> "ProjectPackageJson":
        for name, version in modules.items():
            self.add_dev_dependency(name, version, scope)
        return self

    def add_script(self, name: str, command: str) -> "ProjectPackageJson":
        self.scripts[name] = command
        self.rewrite = True
        return self

    def add_scripts(self, scripts: Mapping[str, str]) -> "ProjectPackageJson":
        for name, command in scripts.items():
            self.add_script(name, command)
        return self

    def add(self, key: str, value: Any) -> "ProjectPackageJson":
        self.raw[key] = value
        self.rewrite = True
        return self

    def set(self, key: str, value: Any) -> None:
        self.raw[key] = value
        self.rewrite = True
        if key in DEPENDENCY_KEYS:
            self.reinstall = True

    def get(self, key: str) -> Any:
        return self.raw.get(key)

    # ------------------------------------------------------------------
    # Disk I/O
    # ------------------------------------------------------------------

    def read(self) -> None:
        """Discard the in-memory state and reload ``package.json``."""
        self.raw = read_package_json(self.config)

    def write(self) -> None:
        """Write ``package.json``; placeholder-versioned entries are left out."""
        self.raw["devDependencies"] = sort_keys(self.dev_dependencies)
        self.raw["dependencies"] = sort_keys(self.dependencies)

        data = {
            **self.raw,
            "dependencies": partition_valid(self.raw["dependencies"]),
            "devDependencies": partition_valid(self.raw["devDependencies"]),
        }

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        self.rewrite = False

    # ------------------------------------------------------------------
    # Package manager
    # ------------------------------------------------------------------

    def has_yarn(self) -> bool:
        try:
            self.runner.run_sync("yarn", ["--version"])
        except (CommandError, OSError):
            return False
        return True

    def install_tasks(self, options: InstallOptions | None = None) -> TaskList:
        """Build the install task list without running it.

        Falls back from yarn to npm when ``yarn --version`` fails.
        """
        options = options.model_copy() if options is not None else InstallOptions()
        if options.package_manager == "yarn" and not self.has_yarn():
            options.package_manager = "npm"

        manager = get_package_manager(options.package_manager, self, options, self.runner)
        extra = options.model_extra or {}

        return TaskList(
            [
                Task("Write package.json", self.write, enabled=lambda: self.rewrite),
                *manager.tasks(),
                Task("Clean", self._clean),
            ],
            concurrent=False,
            silent=bool(extra.get("silent", False)),
        )

    async def install(self, options: InstallOptions | None = None) -> list[TaskResult]:
        return await self.install_tasks(options).run()

    def _clean(self) -> None:
        self.reinstall = False
        self.rewrite = False
        self.read()

    async def run_script(self, name: str, ignore_error: bool = False) -> CommandResult | None:
        """Run ``npm run <name>`` in the project directory."""
        try:
            return await self.runner.run("npm", ["run", name], cwd=self.dir)
        except CommandError:
            if ignore_error:
                return None
            raise

    def import_module(self, name: str) -> ModuleType:
        """Load a module that lives in the project directory."""
        return import_module(name, self.dir)
