"""
Channel computation

Pure functions deriving every total of a day record from its raw fields:
the exempt/taxable split of category sales, the delivery-platform
breakdown and commission, and the cash expected in the till. Nothing here
rounds; rounding happens at display time.
"""

from dataclasses import dataclass
from typing import Mapping, Optional, Union

from sales_reconciliation.config.engine_config import EngineConfig
from sales_reconciliation.engine.rates import ResolvedRates
from sales_reconciliation.engine.settlement import compute_card_settlement
from sales_reconciliation.models.day_record import (
    DeclaredDayRecord,
    RealDayRecord,
)
from sales_reconciliation.models.delivery import DeliveryBreakdown, RateSet
from sales_reconciliation.models.totals import DerivedTotals


@dataclass(frozen=True)
class CategorySplit:
    """Category sales split by tax treatment"""
    exempt_revenue: float
    taxable_gross: float
    taxable_net: float

    @property
    def total_net(self) -> float:
        return self.taxable_net + self.exempt_revenue

    @property
    def theoretical_gross(self) -> float:
        return self.exempt_revenue + self.taxable_gross


@dataclass(frozen=True)
class DeliveryFigures:
    """Derived delivery-platform amounts"""
    taxable_share: float
    exempt_share: float
    net_revenue: float


def split_category_sales(
    category_sales: Mapping[str, float],
    exempt_category: str,
    vat_divisor: float = 1.2,
) -> CategorySplit:
    """
    Split category sales into exempt revenue and taxable revenue
    
    Every category other than the exempt one is taxable at the single
    VAT rate implied by ``vat_divisor``.
    """
    exempt_revenue = 0.0
    taxable_gross = 0.0
    for category, amount in category_sales.items():
        if category == exempt_category:
            exempt_revenue += amount
        else:
            taxable_gross += amount
    
    return CategorySplit(
        exempt_revenue=exempt_revenue,
        taxable_gross=taxable_gross,
        taxable_net=taxable_gross / vat_divisor,
    )


def compute_delivery(
    delivery: DeliveryBreakdown,
    rates: RateSet,
    vat_divisor: float = 1.2,
) -> DeliveryFigures:
    """Derive the delivery shares and the net paid out by the platform"""
    gross = delivery.gross_amount
    return DeliveryFigures(
        taxable_share=(gross * rates.taxable_share_pct / 100) / vat_divisor,
        exempt_share=gross * rates.exempt_share_pct / 100,
        net_revenue=(
            gross * (1 - rates.commission_ttc / 100)
            - delivery.incidents
            - delivery.cash_collected
        ),
    )


def apply_delivery_shares(
    delivery: DeliveryBreakdown,
    rates: RateSet,
    vat_divisor: float = 1.2,
) -> DeliveryBreakdown:
    """Copy of ``delivery`` with its derived shares and rate snapshot filled in"""
    figures = compute_delivery(delivery, rates, vat_divisor)
    update = {
        "taxable_share": figures.taxable_share,
        "exempt_share": figures.exempt_share,
    }
    if delivery.gross_amount != 0 or delivery.rate_snapshot is not None:
        update["rate_snapshot"] = rates.to_snapshot()
    return delivery.model_copy(update=update)


def compute_cash(
    total_gross: float,
    card_amount: float,
    check_amount: float,
    delivery_gross: float,
    delivery_cash: float,
) -> float:
    """
    Cash left in the till
    
    Total sales minus what was settled by card, check or collected by the
    delivery platform, plus the cash the platform handed back.
    """
    return total_gross - card_amount - check_amount - delivery_gross + delivery_cash


def compute_totals(
    record: Union[RealDayRecord, DeclaredDayRecord],
    resolved: ResolvedRates,
    config: Optional[EngineConfig] = None,
) -> DerivedTotals:
    """
    Compute every derived figure of a record
    
    Real records take their total from the manual subtotal plus
    supplements and report the gap to the category sum as a discount
    (negative when the subtotal exceeds it). Declared records have neither,
    so their total is the category sum and their discount is zero.
    
    Args:
        record: Record whose raw fields are read
        resolved: Delivery rates for this record
        config: Engine configuration (defaults when omitted)
        
    Returns:
        Derived totals
    """
    config = config or EngineConfig()
    split = split_category_sales(
        record.category_sales, config.exempt_category, config.vat_divisor
    )
    
    if isinstance(record, RealDayRecord):
        total_gross = (
            record.manual_subtotal
            + record.supplements.caterers
            + record.supplements.register_adjustment
        )
        discount = split.theoretical_gross - record.manual_subtotal
    else:
        total_gross = split.theoretical_gross
        discount = 0.0
    
    rates = resolved.rates
    delivery = compute_delivery(record.delivery, rates, config.vat_divisor)
    payments = record.payments
    settlement = compute_card_settlement(
        payments.card_amount,
        config.card_commission_pct,
        config.card_commission_vat_pct,
    )
    
    return DerivedTotals(
        exempt_revenue=split.exempt_revenue,
        taxable_gross=split.taxable_gross,
        taxable_net=split.taxable_net,
        total_net=split.total_net,
        theoretical_gross=split.theoretical_gross,
        total_gross=total_gross,
        discount=discount,
        card_amount=payments.card_amount,
        check_amount=payments.check_amount,
        card_settlement_net=settlement.net_amount,
        delivery_gross=record.delivery.gross_amount,
        delivery_taxable_share=delivery.taxable_share,
        delivery_exempt_share=delivery.exempt_share,
        delivery_net=delivery.net_revenue,
        commission_ht=rates.commission_ht,
        commission_ttc=rates.commission_ttc,
        cash_derived=compute_cash(
            total_gross,
            payments.card_amount,
            payments.check_amount,
            record.delivery.gross_amount,
            record.delivery.cash_collected,
        ),
        rate_source=resolved.source,
    )
