"""
Registry for tools that an orchestrator can invoke.
"""

import asyncio
import inspect
import logging
import time
from typing import Dict, Any, List, Optional, Callable, Iterable

from ..core.exceptions import ToolNotFoundError
from ..core.interfaces import ToolInterface
from .base import Tool, FunctionTool

logger = logging.getLogger(__name__)


def failure_envelope(tool_name: str) -> Dict[str, Any]:
    """Generic result returned when a tool faults internally."""
    return {"success": False, "message": f"Tool {tool_name} failed: internal error"}


class ToolRegistry(ToolInterface):
    """
    Registry for tools.
    Provides functionality for registering tools and dispatching calls to them.

    `execute_tool` is the dispatch boundary: malformed input is rejected with a
    ValidationError before the tool runs, and anything else that goes wrong
    inside the tool comes back as a failure envelope instead of an exception.
    """

    def __init__(self, simulated_latency: float = 0.0, validate_output: bool = True):
        """
        Initialize the tool registry.

        Args:
            simulated_latency: Seconds to sleep before each tool body
            validate_output: Whether results are checked against output schemas
        """
        self.tools: Dict[str, Tool] = {}
        self.external_tools: set = set()
        self.simulated_latency = simulated_latency
        self.validate_output = validate_output
        logger.info("Initialized tool registry")

    def register_tool(self, tool: Tool) -> None:
        """
        Register a tool.

        Args:
            tool: Tool to register
        """
        if tool.name in self.tools:
            logger.warning(f"Replacing registered tool: {tool.name}")
        self.tools[tool.name] = tool
        logger.info(f"Registered tool: {tool.name}")

    def register_function(self, name: str, description: str, func: Callable,
                          input_schema: Dict[str, Any], output_schema: Dict[str, Any],
                          fallback_for: Optional[str] = None) -> None:
        """
        Register a function as a tool.

        Args:
            name: Name for the tool
            description: Description of what the tool does
            func: Function to execute
            input_schema: JSON Schema for the parameters object
            output_schema: JSON Schema the result must satisfy
            fallback_for: Name of the external tool this one stands in for, if any
        """
        tool = FunctionTool(name, description, func, input_schema, output_schema, fallback_for)
        self.register_tool(tool)

    def set_external_tools(self, tool_names: Iterable[str]) -> None:
        """
        Record which real external tools the orchestrator has available.

        Fallback tools standing in for any of these are disabled.

        Args:
            tool_names: Names of available external tools
        """
        self.external_tools = set(tool_names)
        shadowed = [t.name for t in self.tools.values() if self._is_shadowed(t)]
        if shadowed:
            logger.info(f"Fallback tools disabled by real integrations: {', '.join(shadowed)}")

    def _is_shadowed(self, tool: Tool) -> bool:
        return tool.is_fallback and tool.fallback_for in self.external_tools

    def has_tool(self, tool_name: str) -> bool:
        """
        Check if a tool is registered and enabled.

        Args:
            tool_name: Name of the tool to check

        Returns:
            True if the tool can be executed, False otherwise
        """
        tool = self.tools.get(tool_name)
        return tool is not None and not self._is_shadowed(tool)

    def get_tool(self, tool_name: str) -> Optional[Tool]:
        """
        Get a tool by name.

        Args:
            tool_name: Name of the tool to retrieve

        Returns:
            Tool if found, None otherwise
        """
        return self.tools.get(tool_name)

    def _resolve(self, tool_name: str) -> Tool:
        tool = self.tools.get(tool_name)
        if tool is None:
            raise ToolNotFoundError(tool_name)
        if self._is_shadowed(tool):
            raise ToolNotFoundError(tool_name, f"use {tool.fallback_for} instead")
        return tool

    def _prepare(self, tool: Tool, params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        params = {} if params is None else params
        tool.input_schema.validate(params)
        # Undeclared parameters are dropped rather than forwarded
        declared = set(tool.parameter_names)
        return {key: value for key, value in params.items() if key in declared}

    def _finish(self, tool: Tool, result: Any) -> Any:
        if self.validate_output:
            errors = tool.output_schema.errors(result)
            if errors:
                logger.error(f"Tool {tool.name} returned a result that fails its output schema: "
                             f"{'; '.join(str(e) for e in errors)}")
                return failure_envelope(tool.name)
        return result

    def execute_tool(self, tool_name: str, params: Dict[str, Any]) -> Any:
        """
        Execute a tool with the given parameters.

        Args:
            tool_name: Name of the tool to execute
            params: Parameters to pass to the tool

        Returns:
            Tool execution result

        Raises:
            ToolNotFoundError: If the tool is unknown or disabled
            ValidationError: If the parameters do not match the input schema
        """
        tool = self._resolve(tool_name)
        kwargs = self._prepare(tool, params)
        logger.info(f"Executing tool: {tool_name}")

        if self.simulated_latency:
            time.sleep(self.simulated_latency)

        try:
            result = tool.execute(**kwargs)
        except Exception:
            logger.exception(f"Error executing tool {tool_name}")
            return failure_envelope(tool_name)

        return self._finish(tool, result)

    async def execute_tool_async(self, tool_name: str, params: Dict[str, Any]) -> Any:
        """
        Execute a tool asynchronously with the given parameters.

        Args:
            tool_name: Name of the tool to execute
            params: Parameters to pass to the tool

        Returns:
            Tool execution result

        Raises:
            ToolNotFoundError: If the tool is unknown or disabled
            ValidationError: If the parameters do not match the input schema
        """
        tool = self._resolve(tool_name)
        kwargs = self._prepare(tool, params)
        logger.info(f"Executing tool asynchronously: {tool_name}")

        if self.simulated_latency:
            await asyncio.sleep(self.simulated_latency)

        try:
            if inspect.iscoroutinefunction(getattr(tool, "func", tool.execute)):
                result = await tool.execute(**kwargs)
            else:
                # Run synchronous tools in the executor to avoid blocking the loop
                result = await asyncio.get_running_loop().run_in_executor(
                    None, lambda: tool.execute(**kwargs))
            if inspect.isawaitable(result):
                result = await result
        except Exception:
            logger.exception(f"Error executing tool {tool_name}")
            return failure_envelope(tool_name)

        return self._finish(tool, result)

    def unregister_tool(self, tool_name: str) -> bool:
        """
        Unregister a tool.

        Args:
            tool_name: Name of the tool to unregister

        Returns:
            True if tool was found and unregistered, False otherwise
        """
        if tool_name not in self.tools:
            return False

        del self.tools[tool_name]
        logger.info(f"Unregistered tool: {tool_name}")
        return True

    def get_all_tools(self) -> List[Tool]:
        """
        Get all enabled tools.

        Returns:
            List of tools, in registration order
        """
        return [tool for tool in self.tools.values() if not self._is_shadowed(tool)]

    def get_tool_descriptions(self) -> List[Dict[str, Any]]:
        """
        Get descriptions of all enabled tools.

        Returns:
            List of tool descriptions
        """
        return [
            {
                "name": tool.name,
                "description": tool.description,
                "schema": tool.get_schema()
            }
            for tool in self.get_all_tools()
        ]
