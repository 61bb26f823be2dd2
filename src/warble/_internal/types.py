"""Shared type aliases used across warble modules."""

from collections.abc import Callable, Mapping
from typing import Any, TypeAlias

# Route handler — receives (request, params) and returns a response value
Handler: TypeAlias = Callable[..., Any]

# Render function — user-defined, signature inspected at registration
RenderFunc: TypeAlias = Callable[..., Any]

# Legacy transformer — raw attribute strings to typed properties
Transform: TypeAlias = Callable[[Mapping[str, str]], Mapping[str, Any]]
