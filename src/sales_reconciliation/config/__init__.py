"""
Configuration module
"""

from sales_reconciliation.config.engine_config import (
    EngineConfig,
    RateTable,
    StoreBackend,
    ENV_VAR_MAPPING,
    ConfigDefaults,
)
from sales_reconciliation.config.config_loader import ConfigLoader, configure_logging
from sales_reconciliation.config.config_validator import (
    ConfigValidator,
    ValidationResult,
    ValidationErrorDetail,
)

__all__ = [
    "EngineConfig",
    "RateTable",
    "StoreBackend",
    "ENV_VAR_MAPPING",
    "ConfigDefaults",
    "ConfigLoader",
    "configure_logging",
    "ConfigValidator",
    "ValidationResult",
    "ValidationErrorDetail",
]
