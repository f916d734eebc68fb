"""
Element snapshot tree supplied by the capture layer.

The capture layer converts whatever native element it saw into ElementNode
objects (tag, text, classes, id, attributes, parent link). The classifier
only ever walks these snapshots.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, eq=False)
class ElementNode:
    tag: str
    text: str = ""
    classes: tuple[str, ...] = ()
    id: str | None = None
    attributes: Mapping[str, str] = field(default_factory=dict)
    parent: ElementNode | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "tag", self.tag.lower())

    def get_attribute(self, name: str) -> str | None:
        return self.attributes.get(name)

    def has_attribute(self, name: str) -> bool:
        return name in self.attributes

    @property
    def role(self) -> str | None:
        return self.get_attribute("role")

    @property
    def data_attributes(self) -> dict[str, str]:
        return {k: v for k, v in self.attributes.items() if k.startswith("data-")}

    def lineage(self) -> Iterator[ElementNode]:
        """Self, then each ancestor up to the root."""
        node: ElementNode | None = self
        while node is not None:
            yield node
            node = node.parent

    def closest(self, predicate: Callable[[ElementNode], bool]) -> ElementNode | None:
        for node in self.lineage():
            if predicate(node):
                return node
        return None


@dataclass(frozen=True)
class RawInteraction:
    """A native interaction event forwarded by the capture layer."""

    target: ElementNode
    path: str = "/"
    kind: str = "click"
    detail: Mapping[str, Any] = field(default_factory=dict)
