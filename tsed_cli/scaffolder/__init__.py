"""Ts.ED source scaffolding -- renders provider and project templates.

Templates live in ``tsed_cli/scaffolder/templates/`` (``generate/`` for single
providers, ``init/`` for a new project tree) and are rendered with the
context produced by the ``generate`` and ``init`` commands.

Quick usage::

    from tsed_cli.scaffolder import TemplateRenderer

    renderer = TemplateRenderer()
    await renderer.render_to_file(
        "generate/controller.ts.j2",
        "src/controllers/UserController.ts",
        {"symbol_name": "UserController", "route": "/user"},
    )
"""

from tsed_cli.scaffolder.naming import (
    camel_case,
    class_name,
    kebab_case,
    output_file_path,
    pascal_case,
    route_path,
    snake_case,
)
from tsed_cli.scaffolder.templates import TemplateRenderer, provider_template

__all__ = [
    "TemplateRenderer",
    "camel_case",
    "class_name",
    "kebab_case",
    "output_file_path",
    "pascal_case",
    "provider_template",
    "route_path",
    "snake_case",
]
