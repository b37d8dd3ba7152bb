"""
Configuration loader for artifice.
Loads settings from ~/.artifice/config.toml and ./.artifice/config.toml,
environment overrides, and defaults, and resolves named agent profiles.
"""
from __future__ import annotations

import os
import re
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional


DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_APPROVAL = "ask"
APPROVAL_MODES = ("ask", "auto", "deny")

DEFAULT_CONFIG = """\
# artifice configuration

agent = "default"
tool_approval = "ask"
save_session = true

[agents.default]
model = "gpt-4o-mini"
api_key_env = "OPENAI_API_KEY"
"""


class ConfigError(Exception):
    """Invalid configuration or unresolvable agent profile."""


def home_dir() -> Path:
    return Path(os.getenv("ARTIFICE_HOME", Path.home() / ".artifice")).expanduser()


def local_dir() -> Path:
    return Path(".artifice")


@dataclass
class AgentProfile:
    name: str
    model: Optional[str] = None
    api_key: Optional[str] = None
    api_key_env: Optional[str] = None
    provider: Optional[str] = None
    base_url: Optional[str] = None
    system_prompt: Optional[str] = None
    tools: List[str] = field(default_factory=list)


@dataclass
class ResolvedAgent:
    name: str
    model: str
    api_key: Optional[str] = None
    provider: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL
    system_prompt: Optional[str] = None
    tools: List[str] = field(default_factory=list)


@dataclass
class Settings:
    agent: Optional[str] = None
    agents: Dict[str, AgentProfile] = field(default_factory=dict)
    tool_approval: str = DEFAULT_APPROVAL
    tool_allowlist: List[str] = field(default_factory=list)
    save_session: bool = True
    system_prompt: Optional[str] = None
    log_level: str = "WARNING"
    home: Path = field(default_factory=home_dir)


def _read_toml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        raise ConfigError(f"Error parsing {path}: {exc}") from exc


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value]


def _parse_agents(table: Any) -> Dict[str, AgentProfile]:
    agents: Dict[str, AgentProfile] = {}
    if not isinstance(table, dict):
        return agents
    for name, spec in table.items():
        if not isinstance(spec, dict):
            continue
        agents[name] = AgentProfile(
            name=name,
            model=spec.get("model"),
            api_key=spec.get("api_key"),
            api_key_env=spec.get("api_key_env"),
            provider=spec.get("provider"),
            base_url=spec.get("base_url"),
            system_prompt=spec.get("system_prompt"),
            tools=_string_list(spec.get("tools")),
        )
    return agents


def validate_approval(mode: str) -> str:
    if mode not in APPROVAL_MODES:
        raise ConfigError(f"Invalid tool_approval '{mode}' (expected one of: {', '.join(APPROVAL_MODES)})")
    return mode


def load_settings(paths: Optional[List[Path]] = None) -> Settings:
    home = home_dir()
    config_files = paths if paths is not None else [home / "config.toml", local_dir() / "config.toml"]
    data: Dict[str, Any] = {}
    for path in config_files:
        data.update(_read_toml(path))

    settings = Settings(
        agent=os.getenv("ARTIFICE_AGENT", data.get("agent")),
        agents=_parse_agents(data.get("agents")),
        tool_approval=os.getenv("ARTIFICE_TOOL_APPROVAL", data.get("tool_approval", DEFAULT_APPROVAL)),
        tool_allowlist=_string_list(data.get("tool_allowlist")),
        save_session=bool(data.get("save_session", True)),
        system_prompt=data.get("system_prompt"),
        log_level=os.getenv("ARTIFICE_LOG_LEVEL", data.get("log_level", "WARNING")),
        home=home,
    )
    validate_approval(settings.tool_approval)
    return settings


def resolve_agent(settings: Settings, name: Optional[str] = None) -> ResolvedAgent:
    agent_name = name or settings.agent
    if not agent_name or not settings.agents:
        raise ConfigError("No agent specified. Use --agent or configure a default agent.")
    profile = settings.agents.get(agent_name)
    if profile is None:
        raise ConfigError(f"Unknown agent: '{agent_name}'")
    if not profile.model:
        raise ConfigError(f"Agent '{agent_name}' has no model defined")

    api_key = profile.api_key
    if not api_key and profile.api_key_env:
        api_key = os.getenv(profile.api_key_env)

    return ResolvedAgent(
        name=agent_name,
        model=profile.model,
        api_key=api_key,
        provider=profile.provider,
        base_url=(profile.base_url or DEFAULT_BASE_URL).rstrip("/"),
        system_prompt=profile.system_prompt or settings.system_prompt,
        tools=list(profile.tools),
    )


def install_default_config(home: Optional[Path] = None) -> Path:
    home = home or home_dir()
    config_file = home / "config.toml"
    if config_file.exists():
        raise ConfigError(f"Config already exists at {config_file}")
    (home / "prompts").mkdir(parents=True, exist_ok=True)
    config_file.write_text(DEFAULT_CONFIG, encoding="utf-8")
    return config_file


_AGENT_LINE = re.compile(r'^agent\s*=.*$', re.MULTILINE)


def set_default_agent(name: str, home: Optional[Path] = None) -> Path:
    """Rewrite the top-level `agent = ...` line of the home config file."""
    config_file = (home or home_dir()) / "config.toml"
    text = config_file.read_text(encoding="utf-8") if config_file.exists() else ""
    line = f'agent = "{name}"'
    # Only look above the first table header; later `agent` keys belong to tables.
    header = re.search(r"^\[", text, re.MULTILINE)
    top = text[:header.start()] if header else text
    if _AGENT_LINE.search(top):
        top = _AGENT_LINE.sub(line, top, count=1)
    else:
        top = f"{line}\n" + top
    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(top + (text[header.start():] if header else ""), encoding="utf-8")
    return config_file
