"""Case conversion and symbol naming for generated providers."""

from __future__ import annotations

import re


def split_words(value: str) -> list[str]:
    """Split ``"helloWorld"``, ``"hello-world"`` or ``"HTTPServer"`` into words."""
    spaced = re.sub(r"([a-z0-9])([A-Z])", r"\1 \2", value or "")
    spaced = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1 \2", spaced)
    return [word for word in re.split(r"[^A-Za-z0-9]+", spaced) if word]


def pascal_case(value: str) -> str:
    """``"hello world"`` -> ``"HelloWorld"``."""
    return "".join(word[:1].upper() + word[1:].lower() for word in split_words(value))


def camel_case(value: str) -> str:
    """``"hello world"`` -> ``"helloWorld"``."""
    pascal = pascal_case(value)
    return pascal[:1].lower() + pascal[1:]


def kebab_case(value: str) -> str:
    """``"HelloWorld"`` -> ``"hello-world"``."""
    return "-".join(word.lower() for word in split_words(value))


def snake_case(value: str) -> str:
    """``"HelloWorld"`` -> ``"hello_world"``."""
    return "_".join(word.lower() for word in split_words(value))


def class_name(name: str, suffix: str = "") -> str:
    """Class name for a provider: ``("user", "Controller")`` -> ``"UserController"``.

    The suffix is not repeated when *name* already ends with it.
    """
    base = pascal_case(name)
    if suffix and not base.endswith(suffix):
        base += suffix
    return base


def output_file_path(name: str, suffix: str = "", directory: str = "") -> str:
    """Path of the generated file relative to the sources dir, without extension."""
    symbol = class_name(name, suffix)
    return f"{directory}/{symbol}" if directory else symbol


def route_path(value: str) -> str:
    """Normalise a route: ``"HelloWorld"`` -> ``"/hello-world"``, ``"/rest"`` stays."""
    segments = [kebab_case(segment) for segment in value.split("/")]
    return "/" + "/".join(segment for segment in segments if segment)
