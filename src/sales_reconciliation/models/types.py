"""Shared field types for record models"""

from typing import Annotated

from pydantic import BeforeValidator

from sales_reconciliation.parsing import to_count, to_number


# Tax-inclusive or tax-exclusive money amount, zero on unparseable input
Amount = Annotated[float, BeforeValidator(to_number)]

# Percentage expressed on a 0-100 scale
Percent = Annotated[float, BeforeValidator(to_number)]

# Whole count (tickets, card slips, checks)
Count = Annotated[int, BeforeValidator(to_count)]
