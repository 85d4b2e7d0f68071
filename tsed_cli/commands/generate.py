"""``generate`` command -- renders a single Ts.ED provider into the sources dir."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ..config import CliConfig
from ..manifest import ProjectPackageJson
from ..scaffolder import (
    TemplateRenderer,
    class_name,
    output_file_path,
    pascal_case,
    provider_template,
    route_path,
)
from ..tasks import Task
from ..utils import TsedCliError
from .base import CommandProvider
from .prompts import Choice, Question


class UnknownProviderError(TsedCliError):
    """Raised when ``generate`` is asked for a provider type it does not know."""


@dataclass(frozen=True)
class ProviderType:
    value: str
    name: str
    suffix: str = ""
    directory: str = ""

    def choice(self) -> Choice:
        return Choice(name=self.name, value=self.value)


PROVIDER_TYPES: list[ProviderType] = [
    ProviderType("controller", "Controller", "Controller", "controllers"),
    ProviderType("service", "Service (Injectable)", "Service", "services"),
    ProviderType("middleware", "Middleware", "Middleware", "middlewares"),
    ProviderType("pipe", "Pipe", "Pipe", "pipes"),
    ProviderType("interceptor", "Interceptor", "Interceptor", "interceptors"),
    ProviderType("model", "Model", "", "models"),
    ProviderType("decorator", "Decorator", "", "decorators"),
    ProviderType("module", "Module", "Module", "modules"),
    ProviderType("server", "Server", "", ""),
]

DECORATOR_TYPES: list[Choice] = [
    Choice("Class decorator", "class"),
    Choice("Ts.ED middleware and its decorator", "middleware"),
    Choice("Ts.ED endpoint decorator", "endpoint"),
    Choice("Ts.ED property decorator", "prop"),
    Choice("Ts.ED parameter decorator", "param"),
    Choice("Vanilla Method decorator", "method"),
    Choice("Vanilla Property decorator", "property"),
    Choice("Vanilla Parameter decorator", "parameter"),
    Choice("Generic decorator", "generic"),
]

PLATFORMS: list[Choice] = [
    Choice("Express.js", "express"),
    Choice("Koa.js", "koa"),
]

MIDDLEWARE_POSITIONS: list[Choice] = [
    Choice("Before the endpoint", "before"),
    Choice("After the endpoint", "after"),
]


def get_provider_type(value: str | None) -> ProviderType | None:
    lowered = (value or "").lower()
    for provider in PROVIDER_TYPES:
        if provider.value == lowered:
            return provider
    return None


class GenerateCommand(CommandProvider):
    """Generate a new provider class (controller, service, decorator, ...)."""

    name = "generate"

    def __init__(
        self,
        config: CliConfig,
        package_json: ProjectPackageJson,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        super().__init__(config, package_json)
        self.renderer = renderer or TemplateRenderer()

    def prompt(self, initial: Mapping[str, Any]) -> list[Question]:
        def get_type(state: dict[str, Any]) -> str:
            return (state.get("type") or initial.get("type") or "").lower()

        def get_name(state: dict[str, Any]) -> str:
            return initial.get("name") or pascal_case(
                state.get("name") or initial.get("name") or get_type(state)
            )

        def default_route(state: dict[str, Any]) -> str:
            return "/rest" if get_type(state) == "server" else route_path(get_name(state))

        return [
            Question(
                type="autocomplete",
                name="type",
                message="Which type of provider ?",
                default=initial.get("type"),
                when=not initial.get("type"),
                choices=[provider.choice() for provider in PROVIDER_TYPES],
            ),
            Question(
                type="input",
                name="name",
                message="Which name ?",
                default=get_name,
                when=not initial.get("name"),
            ),
            Question(
                type="list",
                name="platform",
                message="Which platform:",
                default="express",
                when=lambda state: get_type(state) == "server",
                choices=PLATFORMS,
            ),
            Question(
                type="input",
                name="route",
                message="Which route ?",
                default=default_route,
                when=lambda state: get_type(state) in ("controller", "server"),
            ),
            Question(
                type="autocomplete",
                name="template_type",
                message=lambda state: f"Which type of {get_type(state)}?",
                when=lambda state: get_type(state) == "decorator",
                choices=DECORATOR_TYPES,
            ),
            Question(
                type="list",
                name="middleware_position",
                message="The middleware should be called:",
                when=lambda state: get_type(state) == "decorator"
                and state.get("template_type") == "middleware",
                choices=MIDDLEWARE_POSITIONS,
            ),
        ]

    def map_context(self, ctx: Mapping[str, Any]) -> dict[str, Any]:
        provider_type = (ctx.get("type") or "").lower()
        provider = get_provider_type(provider_type)
        suffix = provider.suffix if provider else ""
        directory = provider.directory if provider else ""

        name = ctx.get("name") or pascal_case(provider_type)
        platform = ctx.get("platform") or ("express" if provider_type == "server" else "")
        template_type = (
            (ctx.get("template_type") or "generic") if provider_type == "decorator" else ""
        )
        route = ctx.get("route") or ""
        if not route and provider_type == "server":
            route = "/rest"
        elif not route and provider_type == "controller":
            route = name
        symbol_name = class_name(name, suffix)

        return {
            **ctx,
            "type": provider_type,
            "name": name,
            "template_type": template_type,
            "route": route_path(route) if route else "",
            "platform": platform,
            "symbol_name": symbol_name,
            "symbol_path": output_file_path(name, suffix, directory),
            "symbol_path_basename": symbol_name,
            "express": platform == "express",
            "koa": platform == "koa",
            "platform_symbol": pascal_case(f"Platform {platform}"),
            "middleware_hook": "UseAfter" if ctx.get("middleware_position") == "after" else "UseBefore",
        }

    def template_for(self, ctx: Mapping[str, Any]) -> str:
        return provider_template(ctx["type"], ctx.get("template_type") or "")

    async def exec(self, ctx: dict[str, Any]) -> list[Task]:
        if get_provider_type(ctx.get("type")) is None:
            known = ", ".join(provider.value for provider in PROVIDER_TYPES)
            raise UnknownProviderError(f"Unknown provider type '{ctx.get('type')}'. Expected one of: {known}")

        template = self.template_for(ctx)
        output = self.config.src_path / f"{ctx['symbol_path']}.ts"

        return [
            Task(
                title=f"Generate {ctx['type']} file to '{ctx['symbol_path']}.ts'",
                task=lambda: self.renderer.render_to_file(template, output, ctx),
            )
        ]
