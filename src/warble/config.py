"""Per-registry render settings.

Passed once to ``Registry(config)``; the expansion engine and the kida
environment read it on every render.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RenderConfig:
    """How a registry expands and reports component trees.

    ``debug=True`` turns silently dropped branches into
    ``<!-- warble:error ... -->`` comments::

        registry = Registry(RenderConfig(debug=True, max_depth=8))
    """

    # Expansion
    max_depth: int = 32  # Nesting ceiling for custom tags
    cycle_markers: bool = True  # Leave <!-- warble:cycle ... --> where a cycle was cut

    # Failed branches render as HTML comments instead of ""
    debug: bool = False

    # Templates (kida)
    autoescape: bool = True

    # Output
    css_separator: str = "\n"
