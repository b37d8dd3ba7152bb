"""
Tool registry with JSON-schema metadata, name-glob selection, and safe dispatch.
"""
from __future__ import annotations

from fnmatch import fnmatchcase
from typing import Any, Callable, Dict, List, Optional, Sequence
import logging

Handler = Callable[[Dict[str, Any]], str]


class ToolRegistry:
    def __init__(self):
        self.tools: Dict[str, Dict[str, Any]] = {}
        self.logger = logging.getLogger(__name__)

    def register(self, name: str, description: str, parameters: Dict[str, Any], handler: Handler):
        self.tools[name] = {"description": description, "parameters": parameters, "handler": handler}
        self.logger.debug("Registered tool %s", name)

    def register_all(self, specs: Dict[str, Dict[str, Any]], handlers: Dict[str, Handler]):
        for name, spec in specs.items():
            self.register(name, spec["description"], spec["parameters"], handlers[name])

    def names(self) -> List[str]:
        return list(self.tools)

    def find(self, name: str) -> Optional[Dict[str, Any]]:
        return self.tools.get(name)

    def schemas(self, patterns: Optional[Sequence[str]]) -> List[Dict[str, Any]]:
        """OpenAI function schemas for every tool matching any of `patterns`."""
        if not patterns:
            return []
        result = []
        for name, meta in self.tools.items():
            if any(fnmatchcase(name, pat) for pat in patterns):
                result.append({
                    "type": "function",
                    "function": {
                        "name": name,
                        "description": meta["description"],
                        "parameters": meta["parameters"],
                    },
                })
        return result

    def execute(self, name: str, args: Dict[str, Any]) -> str:
        meta = self.tools.get(name)
        if meta is None:
            self.logger.warning("Unknown tool %s", name)
            return "Tool not found or no executor"
        self.logger.info("Executing tool %s", name)
        try:
            return meta["handler"](args)
        except Exception as exc:
            self.logger.exception("Tool %s raised", name)
            return f"Error: {name} failed: {exc}"


def build_default_registry() -> ToolRegistry:
    from . import file_ops, glob_tool, shell

    registry = ToolRegistry()
    for module in (file_ops, glob_tool, shell):
        registry.register_all(*module.make())
    return registry
