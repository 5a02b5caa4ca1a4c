"""Theme CSS generation.

Theme data is opaque to the content tree; the only thing the runtime
derives from it is the CSS custom properties for each color context.
"""

from collections.abc import Mapping
from typing import Any


def build_theme_styles(theme: Mapping[str, Any] | None) -> str:
    """Render CSS for a theme.

    Each ``theme["contexts"][<name>]["colors"]`` mapping becomes a
    ``.context__<name>`` rule with one ``--<color>`` custom property per
    entry. A ready-made ``theme["css"]`` string is appended unchanged.

    Args:
        theme: Theme data from the site configuration

    Returns:
        CSS text (empty if the theme declares nothing)
    """
    if not theme:
        return ""

    rules: list[str] = []
    contexts = theme.get("contexts")
    if isinstance(contexts, Mapping):
        for name, context in contexts.items():
            colors = context.get("colors") if isinstance(context, Mapping) else None
            if not isinstance(colors, Mapping) or not colors:
                continue
            declarations = "".join(f"  --{key}: {value};\n" for key, value in colors.items())
            rules.append(f".context__{name} {{\n{declarations}}}")

    css = theme.get("css")
    if isinstance(css, str) and css:
        rules.append(css)

    return "\n".join(rules)
