"""Project ``package.json`` management.

Quick usage::

    from tsed_cli.config import CliConfig, InstallOptions
    from tsed_cli.manifest import ProjectPackageJson

    package_json = ProjectPackageJson(CliConfig(root_dir=project_dir))
    package_json.add_dependency("@tsed/common", "{{tsedVersion}}")
    package_json.add_dev_dependency("typescript", "latest")
    await package_json.install(InstallOptions(package_manager="yarn"))
"""

from tsed_cli.manifest.package_json import ProjectPackageJson
from tsed_cli.manifest.package_managers import (
    LOCKFILE_OUTDATED_MESSAGE,
    LockfileOutdatedError,
    NpmManager,
    PackageManager,
    YarnManager,
    get_package_manager,
)
from tsed_cli.manifest.versions import (
    is_valid_version,
    partition_invalid,
    partition_valid,
    substitute_version,
)

__all__ = [
    "LOCKFILE_OUTDATED_MESSAGE",
    "LockfileOutdatedError",
    "NpmManager",
    "PackageManager",
    "ProjectPackageJson",
    "YarnManager",
    "get_package_manager",
    "is_valid_version",
    "partition_invalid",
    "partition_valid",
    "substitute_version",
]
