import logging
import os
from collections.abc import Mapping
from typing import Literal, Optional

from pydantic import BaseModel

from routerbot.errors import ConfigError

logger = logging.getLogger(__name__)

Context = Literal["server", "client"]

# (server variable, client build-time variable)
_ENV_VARS: dict[str, tuple[str, str]] = {
    "openai_api_key": ("OPENAI_API_KEY", "VITE_OPENAI_API_KEY"),
    "supabase_url": ("SUPABASE_URL", "VITE_SUPABASE_URL"),
    "supabase_key": ("SUPABASE_KEY", "VITE_SUPABASE_KEY"),
    "node_env": ("NODE_ENV", "MODE"),
}

_REQUIRED = ("openai_api_key", "supabase_url", "supabase_key")

_DEFAULT_CORS_ORIGINS: list[str] = [
    "http://localhost:5173",     # Vite dev server
    "http://127.0.0.1:5173",
    "http://localhost:3000",     # react-router-serve
    "http://127.0.0.1:3000",
]


def get_env_value(
    server_var: str,
    client_var: str,
    context: Context = "server",
    environ: Optional[Mapping[str, str]] = None,
) -> str:
    """Return the variable for the given runtime context, or "" if unset."""
    env = os.environ if environ is None else environ
    name = server_var if context == "server" else client_var
    return env.get(name) or ""


class AppConfig(BaseModel):
    openai_api_key: str = ""
    supabase_url: str = ""
    supabase_key: str = ""
    node_env: str = ""

    chat_model: str = "gpt-4o"
    embedding_model: str = "text-embedding-3-small"
    temperature: float = 0.7
    max_tokens: int = 1000
    match_threshold: float = 0.5
    match_count: int = 5
    max_tool_rounds: int = 5
    http_timeout: float = 30.0

    log_level: str = "INFO"
    cors_origins: list[str] = _DEFAULT_CORS_ORIGINS
    context: Context = "server"

    def missing_vars(self) -> list[str]:
        idx = 0 if self.context == "server" else 1
        return [_ENV_VARS[f][idx] for f in _REQUIRED if not getattr(self, f)]


def validate(config: AppConfig, context: Optional[Context] = None) -> bool:
    """Check required variables.

    Raises ConfigError in the server context; only warns in the client
    context, where a missing key surfaces later when a call is made.
    """
    ctx = context or config.context
    missing = config.model_copy(update={"context": ctx}).missing_vars()
    if missing:
        msg = f"Missing required environment variables: {', '.join(missing)}"
        if ctx == "server":
            raise ConfigError("CONFIG_MISSING", msg)
        logger.warning(msg)
    return True


def load_config(
    context: Context = "server",
    environ: Optional[Mapping[str, str]] = None,
) -> AppConfig:
    env = os.environ if environ is None else environ
    values = {
        field: get_env_value(server_var, client_var, context, env)
        for field, (server_var, client_var) in _ENV_VARS.items()
    }
    log_level = env.get("ROUTERBOT_LOG_LEVEL")
    if log_level:
        values["log_level"] = log_level.upper()

    config = AppConfig(context=context, **values)

    logger.info("Environment: %s", "Server" if context == "server" else "Browser")
    logger.info("OpenAI key available: %s", bool(config.openai_api_key))
    if not config.openai_api_key:
        logger.error("Missing OpenAI API key - chat will not work")
    return config


_current_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Process-wide config for the launcher; components receive theirs explicitly."""
    global _current_config
    if _current_config is None:
        _current_config = load_config()
    return _current_config
