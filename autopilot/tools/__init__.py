"""
Tools an orchestrator can invoke, and the registry that dispatches them.
"""

from .base import Tool, FunctionTool
from .registry import ToolRegistry, failure_envelope
from .project_tools import register_project_tools
from .analysis_tools import register_analysis_tools
