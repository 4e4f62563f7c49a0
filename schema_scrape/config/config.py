"""Configuration management for the schema scrape engine."""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional
import yaml
from pathlib import Path

from ..query.fragments import (
    DEFAULT_COLUMNS_TEMPLATE,
    DEFAULT_SYSTEM_ALIAS_DATABASE,
    DEFAULT_TABLES_TEMPLATE,
)


@dataclass
class CatalogSourceConfig:
    """Configuration for a single catalog source."""

    name: str
    type: str  # "postgresql" or "duckdb"
    config: Dict[str, Any]


@dataclass
class ScrapeConfig:
    """Where the catalog tables live and which database records aliases."""

    system_alias_database: str = DEFAULT_SYSTEM_ALIAS_DATABASE
    tables_template: str = DEFAULT_TABLES_TEMPLATE
    columns_template: str = DEFAULT_COLUMNS_TEMPLATE


@dataclass
class LoggingConfig:
    """Configuration for log output."""

    level: str = "INFO"
    structured: bool = False
    log_file: Optional[str] = None


@dataclass
class Config:
    """Main configuration class."""

    catalogs: Dict[str, CatalogSourceConfig] = field(default_factory=dict)
    scrape: ScrapeConfig = field(default_factory=ScrapeConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(config_path: str) -> Config:
    """Load configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Parsed configuration

    Example YAML format:
        catalogs:
          db2_mirror:
            type: postgresql
            host: localhost
            port: 5432
            database: catalog
            user: scrape
            password: secret

          snapshot:
            type: duckdb
            path: /data/catalog.duckdb
            read_only: true

        scrape:
          system_alias_database: DSNDB06
          tables_template: "{location}.SYSIBM.SYSTABLES"
          columns_template: "{location}.SYSIBM.SYSCOLUMNS"

        logging:
          level: INFO
          structured: false
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}

    catalogs = {}
    for name, source_config in (data.get("catalogs") or {}).items():
        source_config = dict(source_config)
        source_type = source_config.pop("type")
        catalogs[name] = CatalogSourceConfig(name=name, type=source_type, config=source_config)

    scrape = ScrapeConfig(**(data.get("scrape") or {}))
    logging_config = LoggingConfig(**(data.get("logging") or {}))

    return Config(catalogs=catalogs, scrape=scrape, logging=logging_config)
