"""
Base classes for tools that an orchestrator can invoke.
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import Dict, Any, Optional, Callable

from ..context.schema import Schema

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


def to_snake_case(name: str) -> str:
    """Convert a camelCase parameter name to snake_case."""
    return _CAMEL_BOUNDARY.sub(r"_\1", name).lower()


class Tool(ABC):
    """
    Abstract base class for tools.
    A tool is a named operation with a declared input and output contract.
    """

    def __init__(self, name: str, description: str, input_schema: Dict[str, Any],
                 output_schema: Dict[str, Any], fallback_for: Optional[str] = None):
        """
        Initialize the tool.

        Args:
            name: Name of the tool, as the orchestrator calls it
            description: Description of what the tool does and when to use it
            input_schema: JSON Schema for the parameters object
            output_schema: JSON Schema the result must satisfy
            fallback_for: Name of the external tool this one stands in for, if any
        """
        self.name = name
        self.description = description
        self.input_schema = Schema(f"{name}.input", input_schema)
        self.output_schema = Schema(f"{name}.output", output_schema)
        self.fallback_for = fallback_for

    @property
    def is_fallback(self) -> bool:
        return self.fallback_for is not None

    @property
    def parameter_names(self):
        return list(self.input_schema.definition.get("properties", {}))

    @abstractmethod
    def execute(self, **params) -> Any:
        """
        Execute the tool with already-validated parameters.

        Args:
            **params: Tool parameters, keyed by their wire names

        Returns:
            Tool execution result
        """
        pass

    def get_schema(self) -> Dict[str, Any]:
        """
        Get the complete schema for the tool.

        Returns:
            Schema describing the tool, its parameters, and return type
        """
        schema = {
            "name": self.name,
            "description": self.description,
            "parameters": self.input_schema.definition,
            "returns": self.output_schema.definition,
        }
        if self.fallback_for:
            schema["fallbackFor"] = self.fallback_for
        return schema


class FunctionTool(Tool):
    """
    Tool implementation that wraps a function.

    Wire parameter names are camelCase; they reach the function as snake_case
    keyword arguments.
    """

    def __init__(self, name: str, description: str, func: Callable,
                 input_schema: Dict[str, Any], output_schema: Dict[str, Any],
                 fallback_for: Optional[str] = None):
        """
        Initialize the function tool.

        Args:
            name: Name of the tool
            description: Description of what the tool does
            func: Function to execute
            input_schema: JSON Schema for the parameters object
            output_schema: JSON Schema the result must satisfy
            fallback_for: Name of the external tool this one stands in for, if any
        """
        super().__init__(name, description, input_schema, output_schema, fallback_for)
        self.func = func

    def execute(self, **params) -> Any:
        kwargs = {to_snake_case(key): value for key, value in params.items()}
        return self.func(**kwargs)
