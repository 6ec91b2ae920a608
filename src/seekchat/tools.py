import copy
import inspect
import logging
from collections.abc import Iterable
from typing import Any, Callable

from pydantic import BaseModel, Field

from seekchat.errors import ToolExecutionError, UnknownToolError
from seekchat.request import FunctionDescriptor, ToolDescriptor

logger = logging.getLogger(__name__)


def _empty_parameters() -> dict[str, Any]:
    return {"type": "object", "properties": {}}


class Tool(BaseModel):
    """A function the model may ask to run.

    The callback takes the raw JSON arguments string exactly as the model
    produced it and returns the result text sent back to the model.
    """

    name: str
    description: str = ""
    parameters: dict[str, Any] = Field(default_factory=_empty_parameters)
    callback: Callable[[str], Any] = Field(exclude=True)

    def descriptor(self) -> ToolDescriptor:
        return ToolDescriptor(function=FunctionDescriptor(
            name=self.name,
            description=self.description,
            parameters=self.parameters,
        ))

    def __call__(self, arguments: str) -> str:
        return str(self.callback(arguments))


def _parameters_schema(parameters: type[BaseModel] | dict | None) -> dict[str, Any]:
    if parameters is None:
        return _empty_parameters()
    if isinstance(parameters, type) and issubclass(parameters, BaseModel):
        return parameters.model_json_schema()
    return copy.deepcopy(parameters)


def tool(
    func: Callable[[str], Any] | None = None,
    *,
    name: str | None = None,
    description: str | None = None,
    parameters: type[BaseModel] | dict | None = None,
):
    """Build a :class:`Tool` from a function.

    Usable bare (``@tool``) or with options
    (``@tool(parameters=AddParameters)``). The name defaults to the
    function name and the description to its docstring. *parameters*
    may be a pydantic model, whose JSON schema is exported, or a
    ready-made JSON-schema dict.
    """
    def wrap(f: Callable[[str], Any]) -> Tool:
        return Tool(
            name=name or f.__name__,
            description=description if description is not None else inspect.getdoc(f) or "",
            parameters=_parameters_schema(parameters),
            callback=f,
        )

    if func is not None:
        return wrap(func)
    return wrap


class ToolRegistry:
    """Name-keyed registry of tools with synchronous dispatch."""

    def __init__(self, tools: Iterable[Tool] = ()) -> None:
        self._tools: dict[str, Tool] = {}
        for t in tools:
            self.register(t)

    def register(self, tool: Tool) -> None:
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")
        self._tools[tool.name] = tool

    def lookup(self, name: str) -> Tool:
        tool = self._tools.get(name)
        if tool is None:
            raise UnknownToolError(name, self.names())
        return tool

    def invoke(self, name: str, arguments: str, tool_call_id: str | None = None) -> str:
        """Run tool *name* with *arguments*.

        Any exception from the callback is re-raised as
        :class:`ToolExecutionError`; there is no recovery here.
        """
        tool = self.lookup(name)
        logger.info(f"Calling {name} with {arguments}")
        try:
            return tool(arguments)
        except Exception as e:
            logger.error(f"Tool {name} raised: {e}")
            raise ToolExecutionError(name, tool_call_id) from e

    def descriptors(self) -> list[ToolDescriptor]:
        return [t.descriptor() for t in self._tools.values()]

    def names(self) -> list[str]:
        return list(self._tools)

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools
