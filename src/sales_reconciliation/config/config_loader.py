"""
Configuration Loader
Loads engine configuration from various sources
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from sales_reconciliation.config.engine_config import (
    EngineConfig,
    StoreBackend,
    ENV_VAR_MAPPING,
    ConfigDefaults,
)
from sales_reconciliation.config.config_validator import ConfigValidator
from sales_reconciliation.exceptions import ConfigError


class ConfigLoader:
    """
    ConfigLoader class
    Provides multiple ways to load and merge configuration
    """
    
    def __init__(self) -> None:
        self._validator = ConfigValidator()
    
    def from_file(self, path: Union[str, Path]) -> Dict[str, Any]:
        """
        Load configuration from a JSON file
        
        Args:
            path: Path to JSON configuration file
            
        Returns:
            Loaded configuration dictionary
            
        Raises:
            ConfigError: If file not found or invalid JSON
        """
        file_path = Path(path).resolve()
        
        if not file_path.exists():
            raise ConfigError(
                f"Configuration file not found: {file_path}",
                code="CONFIG_FILE_NOT_FOUND"
            )
        
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(
                f"Invalid JSON in configuration file: {file_path}",
                code="CONFIG_PARSE_ERROR"
            ) from e
        
        if not isinstance(config, dict):
            raise ConfigError(
                f"Configuration file must hold a JSON object: {file_path}",
                code="CONFIG_PARSE_ERROR"
            )
        return self._process_database_path(config, file_path.parent)
    
    def from_environment(self) -> Dict[str, Any]:
        """
        Load configuration from environment variables
        
        Returns:
            Configuration dictionary from environment variables
        """
        config: Dict[str, Any] = {}
        
        for env_var, config_key in ENV_VAR_MAPPING.items():
            value = os.environ.get(env_var)
            if value is not None and value != "":
                config[config_key] = self._parse_env_value(config_key, value)
        
        return config
    
    def from_dict(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Load configuration from a dictionary
        
        Args:
            config: Configuration dictionary
            
        Returns:
            Copy of configuration dictionary
        """
        return config.copy()
    
    def merge(self, *sources: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge multiple configuration sources
        Priority: later sources override earlier sources
        
        Args:
            sources: Configuration dictionaries in order of increasing priority
            
        Returns:
            Merged configuration dictionary
        """
        merged: Dict[str, Any] = {}
        
        for source in sources:
            filtered = self._filter_none(source)
            merged.update(filtered)
        
        return merged
    
    def resolve(self, config: Dict[str, Any]) -> EngineConfig:
        """
        Resolve configuration with defaults and validation
        
        Args:
            config: Partial configuration dictionary
            
        Returns:
            Fully resolved EngineConfig object
            
        Raises:
            ValidationError: If configuration is invalid
        """
        self._validator.validate_or_raise(config)
        
        # Pydantic fills in defaults
        return EngineConfig(**config)
    
    def load(
        self,
        file: Optional[Union[str, Path]] = None,
        env: bool = True,
        config: Optional[Dict[str, Any]] = None,
    ) -> EngineConfig:
        """
        Load, merge, and resolve configuration from multiple sources
        
        Args:
            file: Path to JSON configuration file (optional)
            env: Whether to load from environment variables (default: True)
            config: Programmatic configuration dictionary (optional)
            
        Returns:
            Fully resolved EngineConfig object
        """
        sources: list[Dict[str, Any]] = []
        
        if file is not None:
            sources.append(self.from_file(file))
        
        if env:
            sources.append(self.from_environment())
        
        if config is not None:
            sources.append(config)
        
        merged = self.merge(*sources)
        return self.resolve(merged)
    
    def create_template(self, path: Union[str, Path]) -> None:
        """
        Create a configuration template file
        
        Args:
            path: Path to write template
        """
        template = {
            "exempt_category": ConfigDefaults.EXEMPT_CATEGORY,
            "categories": list(ConfigDefaults.CATEGORIES),
            "vat_divisor": ConfigDefaults.VAT_DIVISOR,
            "rates": {
                "default": {
                    "commission_ht": 15.0,
                    "taxable_share_pct": 90.0,
                    "exempt_share_pct": 10.0,
                },
                "historic": {
                    "commission_ht": 15.0,
                    "taxable_share_pct": 90.0,
                    "exempt_share_pct": 10.0,
                },
            },
            "default_coefficients": {"exempt": 1.11, "taxable": 0.60},
            "card_commission_pct": ConfigDefaults.CARD_COMMISSION_PCT,
            "card_commission_vat_pct": ConfigDefaults.CARD_COMMISSION_VAT_PCT,
            "store_backend": "sql",
            "database_url": "sqlite:///./data/daily_sales.db",
            "timeout": ConfigDefaults.TIMEOUT,
            "retry_attempts": ConfigDefaults.RETRY_ATTEMPTS,
            "retry_delay": ConfigDefaults.RETRY_DELAY,
            "log_level": ConfigDefaults.LOG_LEVEL,
        }
        
        file_path = Path(path)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        
        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(template, f, indent=2)
    
    def _parse_env_value(self, key: str, value: str) -> Any:
        """Parse environment variable value to appropriate type"""
        # Comma-separated list
        if key == "categories":
            return [item.strip() for item in value.split(",") if item.strip()]
        
        # Integer fields
        if key in ("timeout", "retry_attempts", "retry_delay"):
            try:
                return int(value)
            except ValueError:
                return value
        
        # Float fields
        if key in ("vat_divisor", "card_commission_pct", "card_commission_vat_pct"):
            try:
                return float(value)
            except ValueError:
                return value
        
        if key == "store_backend":
            try:
                return StoreBackend(value.lower())
            except ValueError:
                return value
        
        return value
    
    def _process_database_path(
        self, config: Dict[str, Any], base_path: Path
    ) -> Dict[str, Any]:
        """Resolve a relative SQLite path against the config file directory"""
        processed = config.copy()
        
        url = processed.get("database_url")
        prefix = "sqlite:///"
        if isinstance(url, str) and url.startswith(prefix):
            db_path = url[len(prefix):]
            if db_path and db_path != ":memory:" and not Path(db_path).is_absolute():
                processed["database_url"] = prefix + str(base_path / db_path)
        
        return processed
    
    def _filter_none(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Filter out None values from config dictionary"""
        return {k: v for k, v in config.items() if v is not None}


def configure_logging(config: EngineConfig) -> logging.Logger:
    """
    Apply the configured level to the package logger
    
    Handlers are left to the host application.
    
    Args:
        config: Resolved engine configuration
        
    Returns:
        The package logger
    """
    package_logger = logging.getLogger("sales_reconciliation")
    package_logger.setLevel(config.log_level)
    return package_logger
