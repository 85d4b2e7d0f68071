"""``init`` command -- creates a new Ts.ED project in the root directory."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..config import CliConfig
from ..manifest import ProjectPackageJson
from ..scaffolder import TemplateRenderer, kebab_case, pascal_case
from ..tasks import Task
from ..utils import ensure_dir
from .base import CommandProvider
from .generate import PLATFORMS
from .prompts import Choice, Question

PACKAGE_MANAGERS: list[Choice] = [
    Choice("Yarn", "yarn"),
    Choice("NPM", "npm"),
]

SCRIPTS: dict[str, str] = {
    "build": "tsc --project tsconfig.compile.json",
    "start": "ts-node src/index.ts",
    "start:prod": "cross-env NODE_ENV=production node dist/index.js",
    "test": "jest",
}

DEPENDENCIES: dict[str, str] = {
    "@tsed/common": "{{tsedVersion}}",
    "@tsed/core": "{{tsedVersion}}",
    "@tsed/di": "{{tsedVersion}}",
    "@tsed/exceptions": "{{tsedVersion}}",
    "@tsed/schema": "{{tsedVersion}}",
    "@tsed/json-mapper": "{{tsedVersion}}",
    "cross-env": "latest",
}

PLATFORM_DEPENDENCIES: dict[str, dict[str, str]] = {
    "express": {
        "@tsed/platform-express": "{{tsedVersion}}",
        "express": "^4.17.1",
        "body-parser": "latest",
        "compression": "latest",
        "cookie-parser": "latest",
        "cors": "latest",
        "method-override": "latest",
    },
    "koa": {
        "@tsed/platform-koa": "{{tsedVersion}}",
        "koa": "^2.13.0",
        "@koa/cors": "latest",
        "koa-bodyparser": "latest",
        "koa-compress": "latest",
    },
}

DEV_DEPENDENCIES: dict[str, str] = {
    "@types/node": "latest",
    "ts-node": "latest",
    "typescript": "latest",
}


class InitCommand(CommandProvider):
    """Initialise a new Ts.ED project."""

    name = "init"

    def __init__(
        self,
        config: CliConfig,
        package_json: ProjectPackageJson,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        super().__init__(config, package_json)
        self.renderer = renderer or TemplateRenderer()

    def prompt(self, initial: Mapping[str, Any]) -> list[Question]:
        return [
            Question(
                type="input",
                name="name",
                message="What is your project name",
                default=kebab_case(self.config.root_dir.name),
                when=not initial.get("name"),
            ),
            Question(
                type="list",
                name="platform",
                message="Choose the target platform:",
                default="express",
                choices=PLATFORMS,
            ),
            Question(
                type="list",
                name="package_manager",
                message="Choose the package manager:",
                default=self.config.package_manager,
                choices=PACKAGE_MANAGERS,
            ),
        ]

    def map_context(self, ctx: Mapping[str, Any]) -> dict[str, Any]:
        platform = ctx.get("platform") or "express"
        return {
            **ctx,
            "name": kebab_case(ctx.get("name") or self.config.root_dir.name),
            "platform": platform,
            "express": platform == "express",
            "koa": platform == "koa",
            "platform_symbol": pascal_case(f"Platform {platform}"),
            "package_manager": ctx.get("package_manager") or self.config.package_manager,
            "route": "/rest",
            "symbol_name": "Server",
            "tsedVersion": self.config.tsed_version,
        }

    def configure_package_json(self, ctx: Mapping[str, Any]) -> None:
        self.config.package_manager = ctx["package_manager"]

        self.package_json.name = ctx["name"]
        self.package_json.add_scripts(SCRIPTS)
        self.package_json.add_dependencies(DEPENDENCIES, ctx)
        self.package_json.add_dependencies(PLATFORM_DEPENDENCIES[ctx["platform"]], ctx)
        self.package_json.add_dev_dependencies(DEV_DEPENDENCIES, ctx)

    async def exec(self, ctx: dict[str, Any]) -> list[Task]:
        root = self.config.root_dir

        return [
            Task("Create project directory", lambda: ensure_dir(root)),
            Task("Render project files", lambda: self.renderer.render_tree("init", root, ctx)),
            Task(
                "Render src/Server.ts",
                lambda: self.renderer.render_to_file(
                    "generate/server.ts.j2", self.config.src_path / "Server.ts", ctx
                ),
            ),
            Task("Configure package.json", lambda: self.configure_package_json(ctx)),
        ]
