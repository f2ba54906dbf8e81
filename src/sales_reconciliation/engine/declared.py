"""
Declared projection

Builds the fiscal ("declared") record of a day from its real record.
Only category revenue is scaled by the coefficients; payments, tickets
and the delivery channel are settlement facts that can be checked against
external statements, so they are copied from the real record unchanged.
"""

from typing import Optional

from sales_reconciliation.config.engine_config import EngineConfig
from sales_reconciliation.engine.channels import apply_delivery_shares
from sales_reconciliation.engine.rates import RateResolver
from sales_reconciliation.models.day_record import (
    DeclaredCoefficients,
    DeclaredDayRecord,
    RealDayRecord,
)
from sales_reconciliation.models.delivery import RateSet


def project_category_sales(
    category_sales: dict,
    coefficients: DeclaredCoefficients,
    exempt_category: str,
) -> dict:
    """Scale each category by the coefficient of its tax treatment"""
    return {
        category: amount * (
            coefficients.exempt if category == exempt_category else coefficients.taxable
        )
        for category, amount in category_sales.items()
    }


def resolve_coefficients(
    real: RealDayRecord,
    existing: Optional[DeclaredDayRecord] = None,
    config: Optional[EngineConfig] = None,
) -> DeclaredCoefficients:
    """
    Coefficients to project a day with
    
    A saved declared record keeps the coefficients it was first projected
    with. Otherwise the real record's own coefficients apply, then the
    configured defaults.
    """
    if existing is not None and existing.coefficients is not None:
        return existing.coefficients
    if real.declared_coefficients is not None:
        return real.declared_coefficients
    return (config or EngineConfig()).default_coefficients


def project_declared(
    real: RealDayRecord,
    coefficients: DeclaredCoefficients,
    config: Optional[EngineConfig] = None,
    rates: Optional[RateSet] = None,
    base: Optional[DeclaredDayRecord] = None,
) -> DeclaredDayRecord:
    """
    Derive the declared record of a day
    
    Args:
        real: Real record of the day
        coefficients: Exempt and taxable multipliers
        config: Engine configuration (defaults when omitted)
        rates: Delivery rates; resolved from the real record when omitted
        base: Existing declared record whose hours and lifecycle are kept
        
    Returns:
        A new declared record; the inputs are not modified
    """
    config = config or EngineConfig()
    if rates is None:
        rates = RateResolver(config.rates).resolve(
            real.delivery.rate_snapshot,
            gross_amount=real.delivery.gross_amount,
        ).rates
    
    fields = {
        "business_date": real.business_date,
        "category_sales": project_category_sales(
            real.category_sales, coefficients, config.exempt_category
        ),
        "payments": real.payments.model_copy(),
        "ticket_count": real.ticket_count,
        "delivery": apply_delivery_shares(real.delivery, rates, config.vat_divisor),
        "coefficients": coefficients.model_copy(),
    }
    
    if base is not None:
        fields.update(
            open_time=base.open_time.model_copy(),
            close_time=base.close_time.model_copy(),
            sync_status=base.sync_status,
            last_sync_at=base.last_sync_at,
        )
    else:
        fields.update(
            open_time=real.open_time.model_copy(),
            close_time=real.close_time.model_copy(),
        )
    
    return DeclaredDayRecord(**fields)
