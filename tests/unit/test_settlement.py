"""
Card Settlement Unit Tests
"""

import pytest

from sales_reconciliation.engine.settlement import compute_card_settlement


class TestCardSettlement:
    """Tests for compute_card_settlement"""

    def test_default_fees(self):
        """Should deduct 1% commission and 10% VAT on it"""
        settlement = compute_card_settlement(1000)
        assert settlement.commission_ht == pytest.approx(10)
        assert settlement.commission_vat == pytest.approx(1)
        assert settlement.net_amount == pytest.approx(989)

    def test_custom_fees(self):
        """Should apply configured fees"""
        settlement = compute_card_settlement(500, commission_pct=2, commission_vat_pct=20)
        assert settlement.net_amount == pytest.approx(500 - 10 - 2)

    def test_no_card_receipts(self):
        """Should settle nothing without card receipts"""
        assert compute_card_settlement(0).net_amount == 0
