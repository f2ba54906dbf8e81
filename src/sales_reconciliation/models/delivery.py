"""Delivery-platform channel models"""

from typing import Optional

from pydantic import BaseModel, Field, model_validator

from sales_reconciliation.models.types import Amount, Percent


# Tax-inclusive commission is a fixed markup of the tax-exclusive one
COMMISSION_TTC_MARKUP = 1.2


class RateSnapshot(BaseModel):
    """
    Delivery rates in effect when a day's gross amount was entered
    
    A zero field means "not recorded". ``commission_ttc`` is always
    re-derived from ``commission_ht`` when the latter is recorded; it is
    only kept as stored on old snapshots that never held ``commission_ht``.
    """
    
    commission_ht: Percent = Field(default=0.0, description="Commission, tax-exclusive (%)")
    commission_ttc: Percent = Field(default=0.0, description="Commission, tax-inclusive (%)")
    taxable_share_pct: Percent = Field(default=0.0, description="Taxable share of gross (%)")
    exempt_share_pct: Percent = Field(default=0.0, description="Exempt share of gross (%)")
    
    @model_validator(mode="after")
    def derive_commission_ttc(self) -> "RateSnapshot":
        """Keep commission_ttc locked to commission_ht"""
        if self.commission_ht:
            # object.__setattr__ avoids re-running validation on assignment
            object.__setattr__(
                self, "commission_ttc", self.commission_ht * COMMISSION_TTC_MARKUP
            )
        return self


class DeliveryBreakdown(BaseModel):
    """Third-party delivery platform figures for one day"""
    
    gross_amount: Amount = Field(default=0.0, description="Total billed through the platform (TTC)")
    taxable_share: Amount = Field(default=0.0, description="Taxable share of gross, net of VAT")
    exempt_share: Amount = Field(default=0.0, description="Exempt share of gross")
    incidents: Amount = Field(default=0.0, description="Platform-reported incident deductions")
    cash_collected: Amount = Field(default=0.0, description="Cash handed back to the till")
    rate_snapshot: Optional[RateSnapshot] = Field(
        default=None, description="Rates in effect when gross was entered"
    )
    
    @property
    def is_legacy(self) -> bool:
        """True when gross revenue exists but predates rate tracking"""
        return self.gross_amount != 0 and self.rate_snapshot is None


class RateSet(BaseModel):
    """Resolved delivery rates, all on a 0-100 scale"""
    
    commission_ht: float = 15.0
    taxable_share_pct: float = 90.0
    exempt_share_pct: float = 10.0
    
    model_config = {"frozen": True}
    
    @property
    def commission_ttc(self) -> float:
        """Tax-inclusive commission percentage"""
        return self.commission_ht * COMMISSION_TTC_MARKUP
    
    def to_snapshot(self) -> RateSnapshot:
        """Freeze these rates onto a record"""
        return RateSnapshot(
            commission_ht=self.commission_ht,
            taxable_share_pct=self.taxable_share_pct,
            exempt_share_pct=self.exempt_share_pct,
        )
