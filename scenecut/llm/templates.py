"""
scenecut.llm.templates - Prompt template loading and rendering.

Uses Jinja2 to load and render prompt templates. Templates ship with the
package in scenecut/prompts/; a project can override any of them by placing
a file with the same name in its own prompts/ directory.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, Template

DEFAULT_PROMPTS_DIR = Path(__file__).resolve().parent.parent / "prompts"


class PromptTemplateManager:
    """Manages loading and rendering of prompt templates."""

    def __init__(self, prompts_dir: Path | None = None) -> None:
        self.prompts_dir = prompts_dir
        search = [DEFAULT_PROMPTS_DIR]
        if prompts_dir is not None and prompts_dir.exists():
            search.insert(0, prompts_dir)
        self.search_path = search
        self.env = Environment(
            loader=ChoiceLoader([FileSystemLoader(str(p)) for p in search]),
            autoescape=False,
            keep_trailing_newline=True,
        )
        self._cache: dict[str, Template] = {}

    def get_template(self, name: str) -> Template:
        """Load a template by name.

        Args:
            name: Template filename (e.g., "enhance.txt")

        Returns:
            Jinja2 Template object

        Raises:
            FileNotFoundError: If template doesn't exist
        """
        if name not in self._cache:
            if not any((p / name).exists() for p in self.search_path):
                raise FileNotFoundError(f"Template not found: {name}")
            self._cache[name] = self.env.get_template(name)
        return self._cache[name]

    def render(
        self,
        template_name: str,
        variables: dict[str, Any],
    ) -> str:
        """Render a template with variables.

        Args:
            template_name: Template filename
            variables: Dict of template variables

        Returns:
            Rendered prompt string
        """
        template = self.get_template(template_name)
        return template.render(**variables)

    def list_templates(self) -> list[str]:
        """List available templates."""
        names = set()
        for path in self.search_path:
            names.update(f.name for f in path.glob("*.txt"))
        return sorted(names)
