"""Card settlement: what the acquirer pays into the bank for card receipts"""

from dataclasses import dataclass


@dataclass(frozen=True)
class CardSettlement:
    """Breakdown of one day's card receipts as settled by the acquirer"""
    card_amount: float
    commission_ht: float
    commission_vat: float
    net_amount: float


def compute_card_settlement(
    card_amount: float,
    commission_pct: float = 1.0,
    commission_vat_pct: float = 10.0,
) -> CardSettlement:
    """
    Deduct the acquirer commission and the VAT charged on it
    
    Args:
        card_amount: Card receipts for the day (TTC)
        commission_pct: Acquirer commission (%)
        commission_vat_pct: VAT on the commission (%)
        
    Returns:
        Settlement breakdown; ``net_amount`` is what reaches the bank
    """
    commission_ht = card_amount * commission_pct / 100
    commission_vat = commission_ht * commission_vat_pct / 100
    return CardSettlement(
        card_amount=card_amount,
        commission_ht=commission_ht,
        commission_vat=commission_vat,
        net_amount=card_amount - commission_ht - commission_vat,
    )
