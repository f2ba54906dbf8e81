"""
Configuration Validator
Validates engine configuration with clear error messages
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from sales_reconciliation.config.engine_config import StoreBackend


@dataclass
class ValidationErrorDetail:
    """Validation error detail"""
    field: str
    message: str
    value: Optional[Any] = None


@dataclass
class ValidationResult:
    """Validation result"""
    valid: bool
    errors: List[ValidationErrorDetail] = field(default_factory=list)


class ConfigValidator:
    """
    ConfigValidator class
    Checks a raw configuration dictionary before it is turned into a model
    """
    
    def __init__(self) -> None:
        self._errors: List[ValidationErrorDetail] = []
    
    def validate(self, config: Dict[str, Any]) -> ValidationResult:
        """
        Validate the entire configuration dictionary
        
        Args:
            config: Configuration dictionary to validate
            
        Returns:
            ValidationResult with any errors
        """
        self._errors = []
        
        self._validate_categories(config)
        self._validate_tax(config)
        self._validate_rates(config)
        self._validate_coefficients(config)
        self._validate_store(config)
        self._validate_ranges(config)
        
        return ValidationResult(
            valid=len(self._errors) == 0,
            errors=self._errors.copy()
        )
    
    def validate_or_raise(self, config: Dict[str, Any]) -> None:
        """
        Validate and raise if invalid
        
        Args:
            config: Configuration dictionary to validate
            
        Raises:
            ValidationError: If configuration is invalid
        """
        from sales_reconciliation.exceptions import ValidationError
        
        result = self.validate(config)
        if not result.valid:
            error_messages = "; ".join(
                f"{e.field}: {e.message}" for e in result.errors
            )
            raise ValidationError(
                f"Configuration validation failed: {error_messages}",
                code="VAL_CONFIG",
            )
    
    def _validate_categories(self, config: Dict[str, Any]) -> None:
        """Exempt category must be one of the known categories"""
        categories = config.get("categories")
        if categories is not None:
            if not isinstance(categories, list) or not categories:
                self._errors.append(ValidationErrorDetail(
                    field="categories",
                    message="categories must be a non-empty list of codes",
                    value=categories
                ))
                return
        
        exempt = config.get("exempt_category")
        if exempt is not None:
            if not isinstance(exempt, str) or exempt.strip() == "":
                self._errors.append(ValidationErrorDetail(
                    field="exempt_category",
                    message="exempt_category cannot be empty",
                    value=exempt
                ))
                return
        
        if categories is not None and exempt is not None:
            known = [str(c).strip().upper() for c in categories]
            if exempt.strip().upper() not in known:
                self._errors.append(ValidationErrorDetail(
                    field="exempt_category",
                    message="exempt_category must be one of categories",
                    value=exempt
                ))
    
    def _validate_tax(self, config: Dict[str, Any]) -> None:
        """Validate tax and fee percentages"""
        vat_divisor = config.get("vat_divisor")
        if vat_divisor is not None:
            if not isinstance(vat_divisor, (int, float)) or vat_divisor <= 1:
                self._errors.append(ValidationErrorDetail(
                    field="vat_divisor",
                    message="vat_divisor must be a number greater than 1 (e.g. 1.2 for 20% VAT)",
                    value=vat_divisor
                ))
        
        for pct_field in ("card_commission_pct", "card_commission_vat_pct"):
            value = config.get(pct_field)
            if value is not None:
                if not isinstance(value, (int, float)) or not 0 <= value <= 100:
                    self._errors.append(ValidationErrorDetail(
                        field=pct_field,
                        message=f"{pct_field} must be a percentage between 0 and 100",
                        value=value
                    ))
    
    def _validate_rates(self, config: Dict[str, Any]) -> None:
        """Validate delivery rate tables"""
        rates = config.get("rates")
        if rates is None:
            return
        if not isinstance(rates, dict):
            self._errors.append(ValidationErrorDetail(
                field="rates",
                message="rates must be an object with 'default' and 'historic' entries",
                value=rates
            ))
            return
        
        for regime in ("default", "historic"):
            rate_set = rates.get(regime)
            if rate_set is None:
                continue
            if not isinstance(rate_set, dict):
                self._errors.append(ValidationErrorDetail(
                    field=f"rates.{regime}",
                    message="rate set must be an object",
                    value=rate_set
                ))
                continue
            for key in ("commission_ht", "taxable_share_pct", "exempt_share_pct"):
                value = rate_set.get(key)
                if value is None:
                    continue
                if not isinstance(value, (int, float)) or not 0 <= value <= 100:
                    self._errors.append(ValidationErrorDetail(
                        field=f"rates.{regime}.{key}",
                        message="rate must be a percentage between 0 and 100",
                        value=value
                    ))
    
    def _validate_coefficients(self, config: Dict[str, Any]) -> None:
        """Validate default declared coefficients"""
        coefficients = config.get("default_coefficients")
        if coefficients is None:
            return
        if not isinstance(coefficients, dict):
            self._errors.append(ValidationErrorDetail(
                field="default_coefficients",
                message="default_coefficients must be an object with 'exempt' and 'taxable'",
                value=coefficients
            ))
            return
        for key in ("exempt", "taxable"):
            value = coefficients.get(key)
            if value is not None and (not isinstance(value, (int, float)) or value < 0):
                self._errors.append(ValidationErrorDetail(
                    field=f"default_coefficients.{key}",
                    message="coefficient must be a non-negative number",
                    value=value
                ))
    
    def _validate_store(self, config: Dict[str, Any]) -> None:
        """Validate store backend settings"""
        backend = config.get("store_backend")
        if backend is not None:
            valid_backends = [b.value for b in StoreBackend]
            backend_value = backend.value if isinstance(backend, StoreBackend) else backend
            if backend_value not in valid_backends:
                self._errors.append(ValidationErrorDetail(
                    field="store_backend",
                    message=f"store_backend must be one of: {', '.join(valid_backends)}",
                    value=backend
                ))
                return
            if backend_value == StoreBackend.HTTP.value and not config.get("store_base_url"):
                self._errors.append(ValidationErrorDetail(
                    field="store_base_url",
                    message="store_base_url is required for the http backend"
                ))
        
        base_url = config.get("store_base_url")
        if base_url is not None and base_url != "":
            if not str(base_url).startswith(("http://", "https://")):
                self._errors.append(ValidationErrorDetail(
                    field="store_base_url",
                    message="store_base_url must be a valid HTTP/HTTPS URL",
                    value=base_url
                ))
        
        database_url = config.get("database_url")
        if database_url is not None and (
            not isinstance(database_url, str) or "://" not in database_url
        ):
            self._errors.append(ValidationErrorDetail(
                field="database_url",
                message="database_url must be an SQLAlchemy URL (e.g. sqlite:///sales.db)",
                value=database_url
            ))
    
    def _validate_ranges(self, config: Dict[str, Any]) -> None:
        """Validate numeric ranges"""
        timeout = config.get("timeout")
        if timeout is not None:
            if not isinstance(timeout, (int, float)) or timeout <= 0:
                self._errors.append(ValidationErrorDetail(
                    field="timeout",
                    message="timeout must be a positive number (milliseconds)",
                    value=timeout
                ))
            elif timeout < 100:
                self._errors.append(ValidationErrorDetail(
                    field="timeout",
                    message="timeout should be at least 100ms",
                    value=timeout
                ))
            elif timeout > 300000:
                self._errors.append(ValidationErrorDetail(
                    field="timeout",
                    message="timeout should not exceed 300000ms (5 minutes)",
                    value=timeout
                ))
        
        retry_attempts = config.get("retry_attempts")
        if retry_attempts is not None:
            if not isinstance(retry_attempts, int) or retry_attempts < 0:
                self._errors.append(ValidationErrorDetail(
                    field="retry_attempts",
                    message="retry_attempts must be a non-negative integer",
                    value=retry_attempts
                ))
            elif retry_attempts > 10:
                self._errors.append(ValidationErrorDetail(
                    field="retry_attempts",
                    message="retry_attempts should not exceed 10",
                    value=retry_attempts
                ))
        
        retry_delay = config.get("retry_delay")
        if retry_delay is not None:
            if not isinstance(retry_delay, (int, float)) or retry_delay <= 0:
                self._errors.append(ValidationErrorDetail(
                    field="retry_delay",
                    message="retry_delay must be a positive number (milliseconds)",
                    value=retry_delay
                ))
            elif retry_delay > 60000:
                self._errors.append(ValidationErrorDetail(
                    field="retry_delay",
                    message="retry_delay should not exceed 60000ms (1 minute)",
                    value=retry_delay
                ))
        
        log_level = config.get("log_level")
        if log_level is not None and str(log_level).upper() not in (
            "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"
        ):
            self._errors.append(ValidationErrorDetail(
                field="log_level",
                message="log_level must be DEBUG, INFO, WARNING, ERROR or CRITICAL",
                value=log_level
            ))
