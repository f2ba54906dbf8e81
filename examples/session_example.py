"""
Usage Examples for the Sales Reconciliation Engine
Demonstrates configuration, a day's entry and the declared projection
"""

import logging
from datetime import date

from sales_reconciliation import (
    ConfigLoader,
    ConfigValidator,
    EditSession,
    EngineConfig,
    configure_logging,
    create_store,
    summarize_period,
)


# =============================================================================
# Example 1: Configuration
# =============================================================================

def config_example() -> EngineConfig:
    """
    Load configuration from environment variables and overrides

    Set these environment variables before running to change the defaults:

    export RECON_STORE_BACKEND="sql"
    export RECON_DATABASE_URL="sqlite:///daily_sales.db"
    export RECON_LOG_LEVEL="DEBUG"
    """
    loader = ConfigLoader()
    return loader.load(
        env=True,
        config={
            # In-memory SQLite keeps the example self-contained
            "store_backend": "sql",
            "database_url": "sqlite://",
        },
    )


def validation_example() -> None:
    """Validate configuration before use"""
    validator = ConfigValidator()

    result = validator.validate({
        "exempt_category": "FROMAGERIE",
        "vat_divisor": 0.2,
    })

    if not result.valid:
        print("Configuration validation failed:")
        for error in result.errors:
            print(f"  - {error.field}: {error.message}")


# =============================================================================
# Example 2: Entering a Day
# =============================================================================

def real_day_example(session: EditSession, business_date: date) -> None:
    """Enter the register figures of one day and sync them"""
    session.open(business_date, "real")

    session.commit_edit("category_sales.BOULANGERIE", "1000")
    session.commit_edit("category_sales.PATISSERIE", "600,00")
    session.commit_edit("manual_subtotal", "1500")
    session.commit_edit("payments.card_count", "12")
    session.commit_edit("payments.card_amount", "400")
    totals = session.commit_edit("delivery.gross_amount", "100")

    for name, value in totals.display().items():
        print(f"  {name:24} {value:>10}")

    result = session.save(is_draft=False)
    print(f"  saved: {result.success}")


# =============================================================================
# Example 3: Declared Projection
# =============================================================================

def declared_day_example(session: EditSession, business_date: date) -> None:
    """Open the declared record of a day and adjust its taxable coefficient"""
    totals = session.open(business_date, "declared")
    print(f"  declared total: {totals.display()['total_gross']}")

    totals = session.step_coefficient("taxable", -0.01)
    print(f"  after step:     {totals.display()['total_gross']}")

    session.save(is_draft=True)


# =============================================================================
# Run Examples
# =============================================================================

if __name__ == "__main__":
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")

    print("=== Sales Reconciliation Examples ===\n")

    print("1. Configuration Validation:")
    validation_example()
    print()

    config = config_example()
    configure_logging(config)
    store = create_store(config)
    session = EditSession(store, config)
    day = date(2024, 3, 14)

    print("2. Real Day:")
    real_day_example(session, day)
    print()

    print("3. Declared Day:")
    declared_day_example(session, day)
    print()

    print("4. Period Report:")
    report = summarize_period(
        store.iter_records("real"), store.iter_records("declared"), day.year, day.month
    )
    print(f"  {report.start} .. {report.end}: total {report.totals.total_gross:.2f}")
