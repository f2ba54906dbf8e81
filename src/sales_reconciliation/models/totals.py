"""Derived figures computed from a day record"""

from enum import Enum
from typing import Dict

from pydantic import BaseModel, Field


class RateSource(str, Enum):
    """Where the delivery rates applied to a record came from"""
    DEFAULT = "default"
    HINT = "hint"
    HISTORIC = "historic"
    SNAPSHOT = "snapshot"


class DerivedTotals(BaseModel):
    """
    Every computed figure of a day record
    
    Values keep full float precision; use ``display()`` to get the
    two-decimal strings shown to operators.
    """
    
    exempt_revenue: float = Field(..., description="Exempt category revenue")
    taxable_gross: float = Field(..., description="Sum of taxable categories, TTC")
    taxable_net: float = Field(..., description="Taxable revenue, HT")
    total_net: float = Field(..., description="Taxable HT plus exempt revenue")
    theoretical_gross: float = Field(..., description="Sum of category entries, TTC")
    total_gross: float = Field(..., description="Day total, TTC")
    discount: float = Field(..., description="Theoretical minus manual subtotal")
    card_amount: float
    check_amount: float
    card_settlement_net: float = Field(..., description="Card receipts net of acquirer fees")
    delivery_gross: float
    delivery_taxable_share: float
    delivery_exempt_share: float
    delivery_net: float = Field(..., description="Net revenue paid out by the platform")
    commission_ht: float
    commission_ttc: float
    cash_derived: float = Field(..., description="Cash expected in the till")
    rate_source: RateSource
    
    model_config = {"frozen": True}
    
    def display(self) -> Dict[str, str]:
        """Two-decimal strings for every monetary figure"""
        return {
            name: f"{value:.2f}"
            for name, value in self.model_dump().items()
            if isinstance(value, float)
        }
