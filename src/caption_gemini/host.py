"""Execution context handed to nodes by the workflow host."""

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from caption_gemini.models import NodeItem

# A parameter value, or a callable resolving it for (item_index, item).
ParameterValue = Any


class ExecuteContext(Protocol):
    """Host services a node may use while executing a batch.

    Mirrors the subset of the workflow host that nodes depend on: input
    items, per-item parameter resolution and the continue-on-fail switch.
    """

    def get_input_data(self) -> list[NodeItem]:
        """Return the input items of the batch, in order."""
        ...

    def get_node_parameter(
        self, name: str, item_index: int, default: Any = None
    ) -> Any:
        """Resolve parameter ``name`` for the item at ``item_index``."""
        ...

    def continue_on_fail(self) -> bool:
        """Whether failing items are recorded instead of aborting the batch."""
        ...


class NodeExecutionContext:
    """In-memory ``ExecuteContext`` for embedding nodes outside a host.

    Parameter values may be plain values, shared by every item, or callables
    taking ``(item_index, item)`` so each item resolves its own value, the
    way host expressions do. Missing or ``None`` values fall back to the
    default the node asks for.

    Example:
        ```python
        context = NodeExecutionContext(
            items=[NodeItem(json={"url": "https://example.com/a.mp4"})],
            parameters={
                "geminiApiKey": "KEY",
                "mediaUrl": lambda index, item: item.json["url"],
            },
            continue_on_fail=True,
        )
        ```
    """

    def __init__(
        self,
        items: Sequence[NodeItem],
        parameters: Mapping[str, ParameterValue] | None = None,
        continue_on_fail: bool = False,
    ):
        self._items = list(items)
        self._parameters = dict(parameters or {})
        self._continue_on_fail = continue_on_fail

    def get_input_data(self) -> list[NodeItem]:
        return list(self._items)

    def get_node_parameter(
        self, name: str, item_index: int, default: Any = None
    ) -> Any:
        if name not in self._parameters:
            return default
        value = self._parameters[name]
        if callable(value):
            value = value(item_index, self._items[item_index])
        return default if value is None else value

    def continue_on_fail(self) -> bool:
        return self._continue_on_fail
