"""Template manager for loading and rendering Jinja2 prompt templates.

Provides a centralized interface for rendering documentation prompts
from Jinja2 templates stored in the templates/ directory.
"""

import logging
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader

logger = logging.getLogger(__name__)

_DEFAULT_TEMPLATES_DIR = Path(__file__).parent.parent.parent / "templates"


class TemplateManager:
    """Loads and renders Jinja2 prompt templates for feature analysis.

    Templates are loaded from a configurable directory and rendered
    with the feature name, file list and bundled source code.
    """

    def __init__(self, templates_dir: Optional[str] = None) -> None:
        """Initialize the template manager.

        Args:
            templates_dir: Path to the templates directory. Uses the
                default templates/ directory if not specified.
        """
        self._templates_path = (
            Path(templates_dir) if templates_dir else _DEFAULT_TEMPLATES_DIR
        )

        if not self._templates_path.exists():
            logger.warning("Templates directory not found: %s", self._templates_path)

        self._env = Environment(
            loader=FileSystemLoader(str(self._templates_path)),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        logger.debug("Template manager initialized with: %s", self._templates_path)

    def render_feature_prompt(
        self,
        feature_name: str,
        file_names: list[str],
        code: str,
    ) -> str:
        """Render the feature analysis prompt.

        Args:
            feature_name: Name of the feature being documented.
            file_names: Relative names of the included files.
            code: Concatenated, per-file truncated source code.

        Returns:
            Rendered prompt string ready for LLM submission.
        """
        return self._render(
            "feature_analysis.j2",
            feature_name=feature_name,
            file_names=file_names,
            code=code,
        )

    def _render(self, template_name: str, **kwargs: Any) -> str:
        """Render a template with the given context variables.

        Args:
            template_name: Name of the template file to render.
            **kwargs: Template context variables.

        Returns:
            Rendered template string.

        Raises:
            TemplateNotFound: If the template file does not exist.
        """
        template = self._env.get_template(template_name)
        rendered = template.render(**kwargs)
        logger.debug("Rendered template %s (%d chars)", template_name, len(rendered))
        return rendered
