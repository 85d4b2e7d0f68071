"""Ts.ED CLI configuration.

Centralised, typed configuration shared by the commands and the project
``package.json`` model. All settings use Pydantic v2 models so they can be
validated at construction time and overridden from environment
variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

PackageManagerName = Literal["yarn", "npm"]

DEFAULT_TSED_VERSION = "6.10.3"


class InstallOptions(BaseModel):
    """Options accepted by ``ProjectPackageJson.install``.

    Unknown keys are kept so callers can forward extra task-list options
    (``silent`` for instance) through the same object.
    """

    model_config = ConfigDict(extra="allow")

    package_manager: PackageManagerName = Field(default="yarn")
    verbose: bool = Field(default=False)


class CliConfig(BaseModel):
    """Global CLI configuration.

    Holds the project location and the user's preferences. Instances are
    created once by the CLI entry point and passed to every command and to
    the ``ProjectPackageJson`` model, which updates ``project_root`` when it
    discovers a manifest above ``root_dir``.
    """

    name: str = Field(default="", description="Project name used for a new package.json")
    root_dir: Path = Field(default_factory=Path.cwd)
    project_root: Path | None = Field(
        default=None, description="Directory of the package.json found by read()"
    )
    command: str = Field(default="", description="Subcommand currently being executed")
    tsed_version: str = Field(default=DEFAULT_TSED_VERSION)
    package_manager: PackageManagerName = Field(default="yarn")
    verbose: bool = Field(default=False)
    src_dir: str = Field(default="src")

    # ------------------------------------------------------------------
    # Derived paths (read-only properties)
    # ------------------------------------------------------------------

    @property
    def package_json_path(self) -> Path:
        """Path to ``package.json`` inside ``root_dir``."""
        return self.root_dir / "package.json"

    @property
    def src_path(self) -> Path:
        """Directory where generated sources are written."""
        return self.root_dir / self.src_dir

    def install_options(self, **extra: Any) -> InstallOptions:
        """Build the ``InstallOptions`` matching this configuration."""
        return InstallOptions(
            package_manager=self.package_manager,
            verbose=self.verbose,
            **extra,
        )

    # ------------------------------------------------------------------
    # Environment
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls) -> "CliConfig":
        """Build a ``CliConfig`` from environment variables.

        Recognised variables (all optional):
            TSED_CLI_NAME, TSED_CLI_ROOT_DIR, TSED_CLI_TSED_VERSION,
            TSED_CLI_PACKAGE_MANAGER, TSED_CLI_VERBOSE.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("TSED_CLI_NAME"):
            kwargs["name"] = os.environ["TSED_CLI_NAME"]
        if os.environ.get("TSED_CLI_ROOT_DIR"):
            kwargs["root_dir"] = Path(os.environ["TSED_CLI_ROOT_DIR"])
        if os.environ.get("TSED_CLI_TSED_VERSION"):
            kwargs["tsed_version"] = os.environ["TSED_CLI_TSED_VERSION"]
        if os.environ.get("TSED_CLI_PACKAGE_MANAGER"):
            kwargs["package_manager"] = os.environ["TSED_CLI_PACKAGE_MANAGER"]

        verbose = os.environ.get("TSED_CLI_VERBOSE", "").strip().lower()
        kwargs["verbose"] = verbose in {"1", "true", "yes", "on"}

        return cls(**kwargs)
