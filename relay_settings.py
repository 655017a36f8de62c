import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.resend.com/emails"


class Settings(BaseModel, frozen=True):
    form_name: str = "contact"
    from_address: str
    to_address: str
    api_url: str = DEFAULT_API_URL
    api_key: Optional[str] = None
    log_level: str = "INFO"


def expand_env_vars(obj):
    """Recursively expand environment variables in config objects"""
    if isinstance(obj, dict):
        return {k: expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [expand_env_vars(item) for item in obj]
    elif isinstance(obj, str) and obj.startswith('${') and obj.endswith('}'):
        # unset or empty variables come back as None
        return os.getenv(obj[2:-1]) or None
    else:
        return obj


def find_config_path() -> Path:
    override = os.getenv("RELAY_CONFIG")
    if override:
        return Path(override)
    config_path = Path("/config/config.yml")
    if not config_path.exists():
        config_path = Path("config/config.yml")
    if not config_path.exists():
        # in-place checkout
        config_path = Path(__file__).resolve().parent / "config" / "config.yml"
    return config_path


def load_settings(path: Optional[Path] = None) -> Settings:
    load_dotenv()
    config_path = path or find_config_path()

    with open(config_path, "r") as f:
        config = expand_env_vars(yaml.safe_load(f) or {})

    relay = config.get("relay") or {}
    provider = config.get("provider") or {}
    if not relay.get("from") or not relay.get("to"):
        raise ValueError(f"relay.from and relay.to must be set in {config_path}")

    settings = Settings(
        form_name=relay.get("form_name", "contact"),
        from_address=relay["from"],
        to_address=relay["to"],
        api_url=provider.get("api_url", DEFAULT_API_URL),
        api_key=provider.get("api_key"),
        log_level=config.get("log_level", os.getenv("LOG_LEVEL", "INFO")),
    )
    logger.info("✅ Loaded relay config from %s", config_path)
    return settings
