#!/usr/bin/env python
"""
Interactive Autopilot Session
This script provides an interactive shell to call project tools by name
and inspect the dashboard views, the way an orchestrator would.
"""

import argparse
import cmd
import json
import logging
import sys
from typing import Dict, Any

from autopilot import initialize_framework, setup_logging
from autopilot.config.settings import load_config, default_settings, deep_merge
from autopilot.context.views import to_kanban_board
from autopilot.core.exceptions import AutopilotError, ValidationError, ToolNotFoundError


def _print_json(value: Any):
    print(json.dumps(value, indent=2, ensure_ascii=False))


class AutopilotShell(cmd.Cmd):
    """Interactive shell for calling tools and viewing the dashboard."""

    intro = "Welcome to the Autopilot Shell. Type 'help' for a list of commands."
    prompt = "(Autopilot) > "

    def __init__(self, framework_components: Dict[str, Any]):
        """Initialize the shell with framework components."""
        super().__init__()
        self.store = framework_components['store']
        self.tool_registry = framework_components['tool_registry']
        self.data_service = framework_components['data_service']

    def do_tools(self, arg):
        """List available tools."""
        for tool in self.tool_registry.get_all_tools():
            marker = f" (fallback for {tool.fallback_for})" if tool.is_fallback else ""
            print(f"  {tool.name}{marker}")

    def do_describe(self, arg):
        """Show a tool's schema. Usage: describe <tool>"""
        if not arg:
            print("Please specify a tool name. Use 'tools' to see available tools.")
            return

        if not self.tool_registry.has_tool(arg):
            print(f"Tool '{arg}' not found. Use 'tools' to see available tools.")
            return

        _print_json(self.tool_registry.get_tool(arg).get_schema())

    def do_call(self, arg):
        """Call a tool. Usage: call <tool> [json parameters]"""
        parts = arg.split(None, 1)
        if not parts:
            print("Please specify a tool name. Use 'tools' to see available tools.")
            return

        tool_name = parts[0]
        params = {}
        if len(parts) > 1:
            try:
                params = json.loads(parts[1])
            except json.JSONDecodeError as e:
                print(f"Parameters must be a JSON object: {e}")
                return

        try:
            result = self.tool_registry.execute_tool(tool_name, params)
        except ToolNotFoundError as e:
            print(str(e))
            return
        except ValidationError as e:
            print("Invalid parameters:")
            for error in e.errors:
                print(f"  {error}")
            return

        _print_json(result)

    def do_board(self, arg):
        """Show the sprint board view."""
        _print_json(self.data_service.fetch_sprint_data())

    def do_kanban(self, arg):
        """Show the kanban board view."""
        _print_json(to_kanban_board(self.store.list()))

    def do_team(self, arg):
        """Show the team load view."""
        _print_json(self.data_service.fetch_team_data())

    def do_goals(self, arg):
        """Show the sprint goals view."""
        _print_json(self.data_service.fetch_goals_data())

    def do_issue(self, arg):
        """Show a single issue. Usage: issue <id>"""
        parts = arg.split()
        issue = self.store.get(parts[0].strip("\"'")) if parts else None
        if issue is None:
            print(f"Issue '{arg}' not found.")
            return
        _print_json(issue.to_dict())

    def do_reset(self, arg):
        """Restore the issue store to its seed state."""
        self.store.reset()
        print("Issue store reset.")

    def do_exit(self, arg):
        """Exit the shell."""
        print("Goodbye!")
        return True

    def do_quit(self, arg):
        """Exit the shell."""
        return self.do_exit(arg)

    def do_EOF(self, arg):
        """Exit on Ctrl-D."""
        print("Goodbye!")
        return True

    def emptyline(self):
        pass


def main():
    """Main entry point for the interactive autopilot shell."""
    parser = argparse.ArgumentParser(description="Interactive Autopilot Shell")
    parser.add_argument("--config", type=str, default=None, help="Path to configuration file")
    parser.add_argument("--log-level", type=str, default=None, help="Override the configured log level")
    args = parser.parse_args()

    try:
        settings = load_config(args.config) if args.config else deep_merge(default_settings, {})
    except AutopilotError as e:
        print(f"Error loading config file: {e}")
        return 1

    if args.log_level:
        settings = deep_merge(settings, {"logging": {"level": args.log_level}})

    try:
        setup_logging(settings)
    except ValueError as e:
        print(f"Invalid logging configuration: {e}")
        return 1

    framework_components = initialize_framework(settings)

    shell = AutopilotShell(framework_components)

    try:
        shell.cmdloop()
    except KeyboardInterrupt:
        print("\nExiting...")
    except Exception as e:
        logging.error(f"Error in command loop: {e}")
        print(f"An error occurred: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
