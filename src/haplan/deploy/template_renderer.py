# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from jinja2 import Environment, FileSystemLoader, StrictUndefined
from pathlib import Path
from typing import Optional

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


class TemplateRenderer:
    """
    Renders the per-role script blocks.

    Output goes into a shell script verbatim, so nothing is escaped and the
    template's final newline is kept.
    """

    def __init__(self, templates_dir: Optional[Path] = None):
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir or TEMPLATES_DIR)),
            autoescape=False,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )

    def render(self, template_name: str, context: dict) -> str:
        tmpl = self.env.get_template(template_name)
        return tmpl.render(**context)
