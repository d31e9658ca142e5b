from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional
import yaml
from dotenv import load_dotenv

from ecom_analytics.exceptions.errors import ConfigError

load_dotenv()

def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)

def _env_bool(key: str, default: bool = False) -> bool:
    val = os.environ.get(key)
    if val is None:
        return default
    return val.strip().lower() in ("1", "true", "yes", "y", "on")

def _env_list(key: str, default: List[str]) -> List[str]:
    val = os.environ.get(key)
    if not val:
        return default
    return [x.strip() for x in val.split(",") if x.strip()]

@dataclass(frozen=True)
class Settings:
    env: str
    log_level: str
    log_file: Optional[str]

    data_dir: str
    schema_path: str

    delimiter: str
    fallback_encodings: List[str]
    skip_bad_lines: bool
    date_format: Optional[str]

    # Raise on unresolved inner-join keys instead of dropping the rows
    strict_references: bool
    stale_months: int

    export_dir: str

def load_settings(config_dir: str = "config") -> Settings:
    app_env = _env("APP_ENV", "dev")
    cfg_path = Path(config_dir) / f"{app_env}.yaml"
    if not cfg_path.exists():
        raise ConfigError(f"Config not found: {cfg_path}")

    try:
        cfg = yaml.safe_load(cfg_path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Config is not valid YAML: {cfg_path}") from e

    app_cfg = cfg.get("app") or {}
    data_cfg = cfg.get("data") or {}
    ing_cfg = cfg.get("ingestion") or {}
    rep_cfg = cfg.get("reports") or {}
    exp_cfg = cfg.get("export") or {}

    log_file = _env("LOG_FILE", str(app_cfg.get("log_file", "logs/app.log")))
    date_format = _env("DATE_FORMAT", str(ing_cfg.get("date_format", "ISO8601")))

    try:
        stale_months = int(_env("STALE_MONTHS", str(rep_cfg.get("stale_months", 6))))
    except ValueError as e:
        raise ConfigError("stale_months must be an integer") from e

    return Settings(
        env=app_env,
        log_level=_env("LOG_LEVEL", str(app_cfg.get("log_level", "INFO"))),
        log_file=log_file or None,
        data_dir=_env("DATA_DIR", str(data_cfg.get("dir", "data/raw"))),
        schema_path=_env("SCHEMA_PATH", str(data_cfg.get("schema_path", "schemas/schema_registry.yaml"))),
        delimiter=_env("DEFAULT_DELIMITER", str(ing_cfg.get("delimiter", ","))),
        fallback_encodings=_env_list(
            "FALLBACK_ENCODINGS", list(ing_cfg.get("fallback_encodings", ["utf-8", "latin-1"]))
        ),
        skip_bad_lines=_env_bool("SKIP_BAD_LINES", bool(ing_cfg.get("skip_bad_lines", False))),
        date_format=date_format or None,
        strict_references=_env_bool("STRICT_REFERENCES", bool(rep_cfg.get("strict_references", True))),
        stale_months=stale_months,
        export_dir=_env("EXPORT_DIR", str(exp_cfg.get("export_dir", "exports"))),
    )
