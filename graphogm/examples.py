"""Example node and edge types with helpers that link both sides at once."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from graphogm.model import BaseNode, BaseUUIDNode, OgmError
from graphogm.schema import Edge


def _swap_remove(items: list, index: int) -> None:
    items[index] = items[-1]
    items.pop()


@dataclass(eq=False)
class SpecialEdge(BaseNode, Edge):
    """An edge with its own property from an ExampleObject2 to an ExampleObject."""

    start: ExampleObject2 | None = None
    end: ExampleObject | None = None
    some_field: str = ""

    def get_start_node(self) -> Any:
        return self.start

    @classmethod
    def get_start_node_type(cls) -> type:
        return ExampleObject2

    def set_start_node(self, node: Any) -> None:
        if not isinstance(node, ExampleObject2):
            raise OgmError("start node must be an ExampleObject2")
        self.start = node

    def get_end_node(self) -> Any:
        return self.end

    @classmethod
    def get_end_node_type(cls) -> type:
        return ExampleObject

    def set_end_node(self, node: Any) -> None:
        if not isinstance(node, ExampleObject):
            raise OgmError("end node must be an ExampleObject")
        self.end = node


def _require(target: Any) -> None:
    if target is None:
        raise OgmError("start and end can not be nil")


def _require_targets(targets: tuple) -> None:
    if not targets:
        raise OgmError("start and end can not be nil")
    for target in targets:
        _require(target)


@dataclass(eq=False)
class ExampleObject(BaseUUIDNode):
    """A node with children, a parent and one special edge."""

    children: list[ExampleObject] = field(default_factory=list)
    parents: ExampleObject | None = None
    special: SpecialEdge | None = None

    def link_to_example_object_on_field_children(self, *targets: ExampleObject) -> None:
        """Add targets as children and make this node their parent."""
        _require_targets(targets)
        for target in targets:
            self.children.append(target)
            target.parents = self

    def unlink_from_example_object_on_field_children(
        self, *targets: ExampleObject
    ) -> None:
        """Remove targets from the children and clear their parent."""
        _require_targets(targets)
        for target in targets:
            for index, child in enumerate(self.children):
                if child.uuid == target.uuid:
                    _swap_remove(self.children, index)
                    break
            target.parents = None

    def link_to_example_object_on_field_parents(self, target: ExampleObject) -> None:
        """Make target this node's parent and this node one of its children."""
        _require(target)
        self.parents = target
        target.children.append(self)

    def unlink_from_example_object_on_field_parents(
        self, target: ExampleObject
    ) -> None:
        """Clear this node's parent and remove it from target's children."""
        _require(target)
        self.parents = None
        for index, child in enumerate(target.children):
            if child.uuid == self.uuid:
                _swap_remove(target.children, index)
                break

    def link_to_example_object2_on_field_special(
        self, target: ExampleObject2, edge: SpecialEdge
    ) -> None:
        """Join target to this node through ``edge``, target at the start."""
        _require(target)
        if edge is None:
            raise OgmError("edge can not be nil")
        edge.set_start_node(target)
        edge.set_end_node(self)
        self.special = edge
        target.special.append(edge)

    def unlink_from_example_object2_on_field_special(
        self, target: ExampleObject2
    ) -> None:
        """Drop the special edge between target and this node."""
        _require(target)
        self.special = None
        for index, edge in enumerate(target.special):
            end = edge.get_end_node()
            if not isinstance(end, ExampleObject):
                raise OgmError("unable to cast unlink target to [ExampleObject]")
            if end.uuid == self.uuid:
                _swap_remove(target.special, index)
                break


@dataclass(eq=False)
class ExampleObject2(BaseUUIDNode):
    """A node with children, a parent and many special edges."""

    children2: list[ExampleObject2] = field(default_factory=list)
    parents2: ExampleObject2 | None = None
    special: list[SpecialEdge] = field(default_factory=list)

    def link_to_example_object2_on_field_children2(
        self, *targets: ExampleObject2
    ) -> None:
        """Add targets as children and make this node their parent."""
        _require_targets(targets)
        for target in targets:
            self.children2.append(target)
            target.parents2 = self

    def unlink_from_example_object2_on_field_children2(
        self, *targets: ExampleObject2
    ) -> None:
        """Remove targets from the children and clear their parent."""
        _require_targets(targets)
        for target in targets:
            for index, child in enumerate(self.children2):
                if child.uuid == target.uuid:
                    _swap_remove(self.children2, index)
                    break
            target.parents2 = None

    def link_to_example_object2_on_field_parents2(
        self, target: ExampleObject2
    ) -> None:
        """Make target this node's parent and this node one of its children."""
        _require(target)
        self.parents2 = target
        target.children2.append(self)

    def unlink_from_example_object2_on_field_parents2(
        self, target: ExampleObject2
    ) -> None:
        """Clear this node's parent and remove it from target's children."""
        _require(target)
        self.parents2 = None
        for index, child in enumerate(target.children2):
            if child.uuid == self.uuid:
                _swap_remove(target.children2, index)
                break

    def link_to_example_object_on_field_special(
        self, target: ExampleObject, edge: SpecialEdge
    ) -> None:
        """Join this node to target through ``edge``, this node at the start."""
        _require(target)
        if edge is None:
            raise OgmError("edge can not be nil")
        edge.set_start_node(self)
        edge.set_end_node(target)
        self.special.append(edge)
        target.special = edge

    def unlink_from_example_object_on_field_special(
        self, target: ExampleObject
    ) -> None:
        """Drop the special edge between this node and target."""
        _require(target)
        for index, edge in enumerate(self.special):
            end = edge.get_end_node()
            if not isinstance(end, ExampleObject):
                raise OgmError("unable to cast unlink target to [ExampleObject]")
            if end.uuid == target.uuid:
                _swap_remove(self.special, index)
                break
        target.special = None