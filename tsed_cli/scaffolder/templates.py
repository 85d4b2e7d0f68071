"""Jinja2 rendering of the bundled TypeScript templates.

Template files are named after the file they produce plus a ``.j2`` suffix:

* ``generate/<type>.ts.j2`` and ``generate/decorator.<flavour>.ts.j2`` hold
  one provider class each;
* ``init/`` mirrors the tree of a new project (``init/src/index.ts.j2``
  becomes ``<root>/src/index.ts``).
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .naming import camel_case, kebab_case, pascal_case, snake_case

TEMPLATES_DIR = Path(__file__).parent / "templates"
TEMPLATE_SUFFIX = ".j2"
GENERATE_PREFIX = "generate"


def provider_template(kind: str, flavour: str = "") -> str:
    """Name of the template for a ``generate`` provider, e.g. ``generate/decorator.class.ts.j2``."""
    stem = f"{kind}.{flavour}" if flavour else kind
    return f"{GENERATE_PREFIX}/{stem}.ts{TEMPLATE_SUFFIX}"


class TemplateRenderer:
    """Renders templates from *template_dir* with the case filters registered.

    Undefined variables raise instead of rendering as empty strings, so a
    context missing a key (``route`` for a controller) fails loudly.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        self.template_dir = Path(template_dir or TEMPLATES_DIR)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
        self.env.filters.update(
            pascal_case=pascal_case,
            camel_case=camel_case,
            kebab_case=kebab_case,
            snake_case=snake_case,
        )

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        return self.env.get_template(template_path).render(**context)

    async def render_to_file(
        self, template_path: str, output_path: str | Path, context: dict[str, Any]
    ) -> Path:
        """Render *template_path* into *output_path*, creating parent directories."""
        out = Path(output_path)
        await asyncio.to_thread(_write_file, out, self.render(template_path, context))
        return out

    async def render_tree(
        self, prefix: str, output_dir: str | Path, context: dict[str, Any]
    ) -> list[Path]:
        """Render every template under *prefix* into *output_dir*, keeping the layout.

        Files without the ``.j2`` suffix are ignored.  Returns the written paths
        in template order.
        """
        source = self.template_dir / prefix
        if not source.is_dir():
            return []

        written: list[Path] = []
        for template_file in sorted(source.rglob(f"*{TEMPLATE_SUFFIX}")):
            relative = template_file.relative_to(source).as_posix()
            target = Path(output_dir) / relative[: -len(TEMPLATE_SUFFIX)]
            written.append(await self.render_to_file(f"{prefix}/{relative}", target, context))
        return written


def _write_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
