"""Style compiler — logical style keys to scoped CSS class names.

Each component declares ``styles`` as an ordered mapping of logical key
to CSS. Three entry forms are accepted::

    styles = {
        "container": "{ display: flex; gap: 0.5rem; }",   # bare block
        "title": "font-weight: bold;",                     # naked declarations
        "button": ".theme-btn { padding: 0.5rem 1rem; }",  # full rule
    }

Bare blocks and naked declarations are wrapped in a class selector
generated from the key (``buttonPrimary`` / ``button_primary`` ->
``button-primary``). Full rules pass through verbatim and contribute the
leading ``.class`` token of their selector as the class name.

Compilation is a pure function of its input: the same mapping always
yields byte-identical CSS and the same ``ClassMap``.
"""

import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field

from warble.errors import StyleCompileError

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")
_LEADING_CLASS = re.compile(r"^\s*\.(-?[A-Za-z_][\w-]*)")


def kebab_case(key: str) -> str:
    """Convert a logical style key to a class name.

    ``buttonPrimary``, ``button_primary`` and ``button-primary`` all map
    to ``button-primary``.
    """
    return _CAMEL_BOUNDARY.sub(r"-\1", key).replace("_", "-").lower()


@dataclass(frozen=True, slots=True)
class ClassMap:
    """Logical style key -> generated class name.

    Supports attribute access with the snake_case spelling of a key,
    item access with the key as declared, and ``join()`` for building
    conditional class lists::

        classes.button_primary
        classes["buttonPrimary"]
        classes.join("item", done and "item_done")
    """

    _names: dict[str, str] = field(default_factory=dict)

    def __getitem__(self, key: str) -> str:
        try:
            return self._names[key]
        except KeyError:
            pass
        normalized = kebab_case(key)
        for logical, name in self._names.items():
            if kebab_case(logical) == normalized:
                return name
        raise KeyError(key)

    def __getattr__(self, key: str) -> str:
        if key.startswith("__"):
            raise AttributeError(key)
        try:
            return self[key]
        except KeyError:
            msg = f"No style named {key!r}; known styles: {sorted(self._names)}"
            raise AttributeError(msg) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and kebab_case(key) in {kebab_case(k) for k in self._names}

    def as_dict(self) -> dict[str, str]:
        return dict(self._names)

    def join(self, *keys: str | None | bool) -> str:
        """Space-join the class names of every truthy key."""
        return " ".join(self[k] for k in keys if isinstance(k, str) and k)


@dataclass(frozen=True, slots=True)
class CompiledStyles:
    """CSS text plus the class map for one component."""

    css: str
    classes: ClassMap


def compile_styles(
    component: str,
    styles: Mapping[str, str],
    separator: str = "\n",
) -> CompiledStyles:
    """Compile a component's style mapping, preserving declaration order.

    Raises ``StyleCompileError`` if two keys that generate their class
    name would collide.
    """
    rules: list[str] = []
    names: dict[str, str] = {}
    generated: dict[str, str] = {}

    for key, source in styles.items():
        text = source.strip()
        match = _LEADING_CLASS.match(text)
        if match is not None:
            names[key] = match.group(1)
            rules.append(text)
            continue

        class_name = kebab_case(key)
        owner = generated.get(class_name)
        if owner is not None:
            raise StyleCompileError(
                component,
                f"keys {owner!r} and {key!r} both generate class {class_name!r}",
            )
        generated[class_name] = key
        names[key] = class_name

        if text.startswith("{"):
            rules.append(f".{class_name} {text}")
        elif "{" in text:
            # Element selector or at-rule; no class token to extract
            rules.append(text)
        else:
            rules.append(f".{class_name} {{ {text} }}")

    return CompiledStyles(css=separator.join(rules), classes=ClassMap(names))
