"""Shared enumerations and choices used across apps."""

from django.db import models


class TransactionType(models.TextChoices):
    STOCK_IN = "stock_in", "Stock in"
    STOCK_OUT = "stock_out", "Stock out"
    ADJUSTMENT = "adjustment", "Adjustment"
    TRANSFER = "transfer", "Transfer"


class StockStatus(models.TextChoices):
    IN_STOCK = "in_stock", "In stock"
    LOW_STOCK = "low_stock", "Low stock"
    OUT_OF_STOCK = "out_of_stock", "Out of stock"


class SummaryRange(models.TextChoices):
    """Named windows for daily summary reports."""

    TODAY = "today", "Today"
    WEEK = "week", "Last 7 days"
    MONTH = "month", "Last 30 days"
    QUARTER = "quarter", "Last 90 days"
    ALL = "all", "All time"


class StockOutPolicy(models.TextChoices):
    """What the ledger does when a stock_out exceeds the stock on hand."""

    CLAMP = "clamp", "Clamp to zero"
    REJECT = "reject", "Reject"


# EOF
