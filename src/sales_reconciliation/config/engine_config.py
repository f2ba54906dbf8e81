"""
Engine Configuration Types and Schema
Type-safe configuration objects for the reconciliation engine
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from sales_reconciliation.models.day_record import DeclaredCoefficients
from sales_reconciliation.models.delivery import RateSet


class StoreBackend(str, Enum):
    """Day-record store backends"""
    MEMORY = "memory"
    SQL = "sql"
    HTTP = "http"


class RateTable(BaseModel):
    """
    Delivery rate constants
    
    ``default`` is the current global default offered for new days and may
    change over time. ``historic`` is the fixed regime every legacy record
    was computed under and must not be edited once records exist.
    """
    
    default: RateSet = Field(default_factory=RateSet)
    historic: RateSet = Field(default_factory=RateSet)


class ConfigDefaults:
    """Default configuration values"""
    EXEMPT_CATEGORY = "BOULANGERIE"
    CATEGORIES = ["BOULANGERIE", "PATISSERIE", "VIENNOISERIE", "SNACKING", "BOISSONS"]
    VAT_DIVISOR = 1.2
    CARD_COMMISSION_PCT = 1.0
    CARD_COMMISSION_VAT_PCT = 10.0
    STORE_BACKEND = StoreBackend.MEMORY
    DATABASE_URL = "sqlite:///daily_sales.db"
    TIMEOUT = 10000
    RETRY_ATTEMPTS = 3
    RETRY_DELAY = 500
    LOG_LEVEL = "INFO"


# Environment variable mapping
ENV_VAR_MAPPING = {
    "RECON_EXEMPT_CATEGORY": "exempt_category",
    "RECON_CATEGORIES": "categories",
    "RECON_VAT_DIVISOR": "vat_divisor",
    "RECON_CARD_COMMISSION_PCT": "card_commission_pct",
    "RECON_CARD_COMMISSION_VAT_PCT": "card_commission_vat_pct",
    "RECON_STORE_BACKEND": "store_backend",
    "RECON_DATABASE_URL": "database_url",
    "RECON_STORE_BASE_URL": "store_base_url",
    "RECON_TIMEOUT": "timeout",
    "RECON_RETRY_ATTEMPTS": "retry_attempts",
    "RECON_RETRY_DELAY": "retry_delay",
    "RECON_LOG_LEVEL": "log_level",
}


class EngineConfig(BaseModel):
    """
    Main engine configuration
    Tax rates and platform fees are business configuration, not code
    """
    
    # Sales categories
    exempt_category: str = Field(
        default=ConfigDefaults.EXEMPT_CATEGORY,
        description="Category code that is wholly VAT-exempt",
        min_length=1,
    )
    categories: List[str] = Field(
        default_factory=lambda: list(ConfigDefaults.CATEGORIES),
        description="Known sales category codes",
        min_length=1,
    )
    
    # Tax and fees
    vat_divisor: float = Field(
        default=ConfigDefaults.VAT_DIVISOR,
        description="Divisor turning taxable TTC into HT",
        gt=1.0,
    )
    rates: RateTable = Field(
        default_factory=RateTable,
        description="Delivery platform rate constants",
    )
    default_coefficients: DeclaredCoefficients = Field(
        default_factory=DeclaredCoefficients,
        description="Declared projection coefficients for days without their own",
    )
    card_commission_pct: float = Field(
        default=ConfigDefaults.CARD_COMMISSION_PCT,
        description="Card acquirer commission (%)",
        ge=0,
        le=100,
    )
    card_commission_vat_pct: float = Field(
        default=ConfigDefaults.CARD_COMMISSION_VAT_PCT,
        description="VAT charged on the card commission (%)",
        ge=0,
        le=100,
    )
    
    # Persistence
    store_backend: StoreBackend = Field(
        default=ConfigDefaults.STORE_BACKEND,
        description="Store backend: 'memory', 'sql' or 'http'",
    )
    database_url: str = Field(
        default=ConfigDefaults.DATABASE_URL,
        description="SQLAlchemy URL for the sql backend",
    )
    store_base_url: Optional[str] = Field(
        default=None,
        description="Base URL of the http backend",
    )
    timeout: int = Field(
        default=ConfigDefaults.TIMEOUT,
        description="HTTP request timeout in milliseconds",
        ge=100,
        le=300000,
    )
    retry_attempts: int = Field(
        default=ConfigDefaults.RETRY_ATTEMPTS,
        description="Number of retry attempts for idempotent HTTP calls",
        ge=0,
        le=10,
    )
    retry_delay: int = Field(
        default=ConfigDefaults.RETRY_DELAY,
        description="Base delay between retries in milliseconds",
        ge=1,
        le=60000,
    )
    
    # Logging
    log_level: str = Field(
        default=ConfigDefaults.LOG_LEVEL,
        description="Root level for the package logger",
    )
    
    model_config = {
        "str_strip_whitespace": True,
        "validate_assignment": True,
    }
    
    @field_validator("exempt_category")
    @classmethod
    def normalize_exempt_category(cls, v: str) -> str:
        """Category codes are upper case"""
        return v.upper()
    
    @field_validator("categories")
    @classmethod
    def normalize_categories(cls, v: List[str]) -> List[str]:
        """Upper-case codes, drop blanks and duplicates"""
        seen: List[str] = []
        for code in v:
            code = code.strip().upper()
            if code and code not in seen:
                seen.append(code)
        return seen
    
    @field_validator("store_base_url")
    @classmethod
    def validate_store_base_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate store_base_url is a valid URL"""
        if v is not None and v != "":
            if not v.startswith(("http://", "https://")):
                raise ValueError("store_base_url must be a valid HTTP/HTTPS URL")
            return v.rstrip("/")
        return v
    
    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log_level is a standard logging level name"""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError("log_level must be DEBUG, INFO, WARNING, ERROR or CRITICAL")
        return level
    
    @model_validator(mode="after")
    def check_backend_settings(self) -> "EngineConfig":
        """Exempt category must be known; http backend needs a base URL"""
        if self.exempt_category not in self.categories:
            raise ValueError(
                f"exempt_category {self.exempt_category} is not in categories"
            )
        if self.store_backend == StoreBackend.HTTP and not self.store_base_url:
            raise ValueError("store_base_url is required for the http backend")
        return self
    
    @property
    def taxable_categories(self) -> List[str]:
        """Every known category except the exempt one"""
        return [c for c in self.categories if c != self.exempt_category]
