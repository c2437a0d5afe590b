"""Template substitution - fills "{ field }" placeholders from the dashboard context."""
import re
from typing import Mapping

PLACEHOLDER = re.compile(r"\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}")


class TemplateRenderError(Exception):
    """Raised when a template references a field the context does not have."""
    pass


def render_template(template: str, fields: Mapping[str, str]) -> str:
    """
    Replace every "{ name }" placeholder with its value, unescaped.

    Args:
        template: Template text (an SVG document)
        fields: Field values by name

    Returns:
        Rendered text

    Raises:
        TemplateRenderError: If a placeholder names an unknown field
    """
    def substitute(match: "re.Match") -> str:
        name = match.group(1)
        if name not in fields:
            raise TemplateRenderError(f"Template references unknown field '{name}'")
        return str(fields[name])

    return PLACEHOLDER.sub(substitute, template)
