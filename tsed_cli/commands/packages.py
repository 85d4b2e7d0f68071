"""``add`` and ``run`` commands -- thin wrappers over the project manifest."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..tasks import Task
from ..utils import TsedCliError
from .base import CommandProvider


def parse_package(spec: str) -> tuple[str, str]:
    """Split ``name@version`` into its parts; the version defaults to ``latest``.

    Scoped names keep their leading ``@``::

        parse_package("@tsed/common@6.0.0") -> ("@tsed/common", "6.0.0")
        parse_package("@tsed/common")       -> ("@tsed/common", "latest")
    """
    spec = spec.strip()
    separator = spec.rfind("@")
    if separator <= 0:
        return spec, "latest"
    return spec[:separator], spec[separator + 1 :] or "latest"


class AddCommand(CommandProvider):
    """Add packages to ``package.json`` and install them."""

    name = "add"

    def map_context(self, ctx: Mapping[str, Any]) -> dict[str, Any]:
        packages = [parse_package(spec) for spec in ctx.get("packages") or []]
        return {**ctx, "packages": packages, "dev": bool(ctx.get("dev"))}

    def add_packages(self, packages: list[tuple[str, str]], dev: bool) -> None:
        for name, version in packages:
            if dev:
                self.package_json.add_dev_dependency(name, version)
            else:
                self.package_json.add_dependency(name, version)

    async def exec(self, ctx: dict[str, Any]) -> list[Task]:
        if not ctx["packages"]:
            raise TsedCliError("No package to add")

        section = "devDependencies" if ctx["dev"] else "dependencies"
        return [
            Task(
                f"Add {len(ctx['packages'])} package(s) to {section}",
                lambda: self.add_packages(ctx["packages"], ctx["dev"]),
            )
        ]


class RunCommand(CommandProvider):
    """Run a ``package.json`` script through npm."""

    name = "run"

    async def exec(self, ctx: dict[str, Any]) -> list[Task]:
        script = ctx.get("script")
        if not script:
            raise TsedCliError("No script name given")

        return [
            Task(
                f"Run script '{script}'",
                lambda: self.package_json.run_script(script, ignore_error=bool(ctx.get("ignore_error"))),
            )
        ]
