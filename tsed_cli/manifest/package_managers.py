"""Package manager backends.

Each backend turns the pending state of a :class:`ProjectPackageJson` into
three ordered tasks:

1. install the dependencies declared in ``package.json`` (only when the
   manifest's ``reinstall`` flag is set),
2. add the runtime dependencies whose version is a placeholder,
3. add the dev dependencies whose version is a placeholder.

Install targets are computed when each task runs, not when the list is built.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..config import InstallOptions
from ..tasks import Task
from ..utils import CommandError, CommandResult, CommandRunner
from .versions import partition_invalid

if TYPE_CHECKING:
    from .package_json import ProjectPackageJson

LOCKFILE_OUTDATED_SIGNATURE = "error Your lockfile needs to be updated"
LOCKFILE_OUTDATED_MESSAGE = (
    "yarn.lock file is outdated. Run yarn, commit the updated lockfile and try again."
)


class LockfileOutdatedError(CommandError):
    """Raised instead of yarn's own error when ``yarn.lock`` is stale."""


class PackageManager:
    """Base backend: builds the install tasks for one package manager binary."""

    name = ""
    label = ""

    def __init__(
        self,
        manifest: "ProjectPackageJson",
        options: InstallOptions | None = None,
        runner: CommandRunner | None = None,
    ) -> None:
        self.manifest = manifest
        self.options = options or InstallOptions(package_manager=self.name)
        self.runner = runner or manifest.runner

    # -- Command lines -------------------------------------------------------

    def bulk_install_args(self) -> list[str]:
        raise NotImplementedError

    def add_args(self, targets: list[str]) -> list[str]:
        raise NotImplementedError

    def add_dev_args(self, targets: list[str]) -> list[str]:
        raise NotImplementedError

    def verbose_args(self) -> list[str]:
        return ["--verbose"] if self.options.verbose else []

    def dependency_targets(self) -> list[str]:
        return partition_invalid(self.manifest.dependencies)

    def dev_dependency_targets(self) -> list[str]:
        return partition_invalid(self.manifest.dev_dependencies)

    # -- Execution -----------------------------------------------------------

    def translate_error(self, error: CommandError) -> CommandError:
        """Map a backend failure to the error surfaced to the user."""
        return error

    async def run(self, args: list[str]) -> CommandResult:
        try:
            return await self.runner.run(self.name, args, cwd=self.manifest.dir)
        except CommandError as exc:
            translated = self.translate_error(exc)
            if translated is exc:
                raise
            raise translated from exc

    # -- Tasks ---------------------------------------------------------------

    def bulk_install_task(self) -> Task:
        return Task(
            title=f"Installing dependencies using {self.label}",
            skip=lambda: not self.manifest.reinstall,
            task=lambda: self.run(self.bulk_install_args()),
        )

    def add_dependencies_task(self) -> Task:
        return Task(
            title=f"Add dependencies using {self.label}",
            skip=lambda: not self.dependency_targets(),
            task=lambda: self.run(self.add_args(self.dependency_targets())),
        )

    def add_dev_dependencies_task(self) -> Task:
        return Task(
            title=f"Add devDependencies using {self.label}",
            skip=lambda: not self.dev_dependency_targets(),
            task=lambda: self.run(self.add_dev_args(self.dev_dependency_targets())),
        )

    def tasks(self) -> list[Task]:
        return [
            self.bulk_install_task(),
            self.add_dependencies_task(),
            self.add_dev_dependencies_task(),
        ]


class YarnManager(PackageManager):
    name = "yarn"
    label = "Yarn"

    def bulk_install_args(self) -> list[str]:
        return ["install", "--production=false", *self.verbose_args()]

    def add_args(self, targets: list[str]) -> list[str]:
        return ["add", *self.verbose_args(), *targets]

    def add_dev_args(self, targets: list[str]) -> list[str]:
        return ["add", "-D", *self.verbose_args(), *targets]

    def translate_error(self, error: CommandError) -> CommandError:
        if (error.stderr or "").startswith(LOCKFILE_OUTDATED_SIGNATURE):
            return LockfileOutdatedError(
                LOCKFILE_OUTDATED_MESSAGE,
                cmd=error.cmd,
                returncode=error.returncode,
                stdout=error.stdout,
                stderr=error.stderr,
            )
        return error


class NpmManager(PackageManager):
    name = "npm"
    label = "npm"

    def bulk_install_args(self) -> list[str]:
        return ["install", "--no-production", *self.verbose_args()]

    def add_args(self, targets: list[str]) -> list[str]:
        return ["install", "--save", *self.verbose_args(), *targets]

    def add_dev_args(self, targets: list[str]) -> list[str]:
        return ["install", "--save-dev", *self.verbose_args(), *targets]


PACKAGE_MANAGERS: dict[str, type[PackageManager]] = {
    "yarn": YarnManager,
    "npm": NpmManager,
}


def get_package_manager(
    name: str,
    manifest: "ProjectPackageJson",
    options: InstallOptions | None = None,
    runner: CommandRunner | None = None,
) -> PackageManager:
    """Return the backend registered under *name* (``"yarn"`` or ``"npm"``)."""
    try:
        manager_cls = PACKAGE_MANAGERS[name]
    except KeyError as exc:
        raise ValueError(f"Unknown package manager: {name!r}") from exc
    return manager_cls(manifest, options, runner)
