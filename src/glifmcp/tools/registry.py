"""
Tool group registry for glif-mcp.

Built-in tools are organized in groups. Each group has an activation
predicate evaluated against the current Settings, so a group appears and
disappears with its flag without a restart.

Design:
    - Groups keep declaration order; the first group is the always-on core
    - A tool name may belong to only one group
    - Predicates are evaluated on every lookup (no enablement caching)

Usage:
    registry = ToolGroupRegistry()
    registry.register(ToolGroup.of("core", always_on, [RunWorkflowTool()]))
    groups = registry.active_groups(settings)
"""

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field

from glifmcp.naming import is_valid_tool_name
from glifmcp.schema import Settings
from glifmcp.tools.base import Tool

GroupPredicate = Callable[[Settings], bool]


def always_on(settings: Settings) -> bool:
    """Predicate for groups that can't be disabled."""
    return True


@dataclass(frozen=True)
class ToolGroup:
    """
    A named set of tools sharing one activation predicate.

    Attributes:
        name: Group identifier (e.g. "core", "discovery")
        is_active: Predicate over the current settings
        tools: Mapping of tool name to tool, in declaration order
    """

    name: str
    is_active: GroupPredicate
    tools: dict[str, Tool] = field(default_factory=dict)

    @classmethod
    def of(cls, name: str, is_active: GroupPredicate, tools: Iterable[Tool]) -> "ToolGroup":
        """
        Build a group from tool instances.

        Raises:
            ValueError: If a tool name is outside the tool name grammar, or
                two tools share a name
        """
        mapping: dict[str, Tool] = {}
        for tool in tools:
            if not is_valid_tool_name(tool.name):
                msg = f"Invalid tool name {tool.name!r} in group {name!r}"
                raise ValueError(msg)
            if tool.name in mapping:
                msg = f"Duplicate tool {tool.name!r} in group {name!r}"
                raise ValueError(msg)
            mapping[tool.name] = tool
        return cls(name=name, is_active=is_active, tools=mapping)

    def get(self, name: str) -> Tool | None:
        return self.tools.get(name)


class ToolGroupRegistry:
    """
    Ordered collection of tool groups.

    Attributes:
        _groups: Registered groups in declaration order
    """

    def __init__(self, groups: Iterable[ToolGroup] = ()) -> None:
        """Initialize the registry, registering any groups given."""
        self._groups: list[ToolGroup] = []
        for group in groups:
            self.register(group)

    def register(self, group: ToolGroup) -> None:
        """
        Append a group.

        Raises:
            ValueError: If the group name is taken, or one of its tools is
                already provided by another group
        """
        if any(existing.name == group.name for existing in self._groups):
            msg = f"Tool group {group.name!r} is already registered"
            raise ValueError(msg)

        clashes = self.static_names() & set(group.tools)
        if clashes:
            msg = f"Tool group {group.name!r} redefines tools: {', '.join(sorted(clashes))}"
            raise ValueError(msg)

        self._groups.append(group)

    @property
    def groups(self) -> tuple[ToolGroup, ...]:
        return tuple(self._groups)

    def active_groups(self, settings: Settings) -> list[ToolGroup]:
        """Groups whose predicate holds for these settings, in order."""
        return [group for group in self._groups if group.is_active(settings)]

    def static_names(self) -> set[str]:
        """Names of every built-in tool, active or not."""
        return {name for group in self._groups for name in group.tools}

    def __len__(self) -> int:
        """Return the number of registered groups."""
        return len(self._groups)

    def __iter__(self) -> Iterator[ToolGroup]:
        """Iterate over groups in declaration order."""
        return iter(self._groups)

    def __contains__(self, name: str) -> bool:
        """Check if a group name is registered using 'in' operator."""
        return any(group.name == name for group in self._groups)

    def __repr__(self) -> str:
        """String representation of the registry."""
        names = ", ".join(group.name for group in self._groups)
        return f"<ToolGroupRegistry: [{names}]>"
