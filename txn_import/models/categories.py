from __future__ import annotations

from enum import Enum

from .import_record import TransactionType

"""Category and payment-mode label tables.

Each value set is an enum with an exhaustive label mapping. Lookups of values
outside the enum fall through unchanged, so free-form categories from CSV
files are still displayed as typed.
"""

__all__ = [
    "IncomeCategory",
    "ExpenseCategory",
    "PaymentMode",
    "category_label",
    "payment_mode_label",
]


class IncomeCategory(Enum):
    SALARY = "salary"
    FREELANCE = "freelance"
    INVESTMENT = "investment"
    GIFTS = "gifts"
    REFUNDS = "refunds"
    OTHER_INCOME = "other-income"


class ExpenseCategory(Enum):
    FOOD = "food"
    TRANSPORT = "transport"
    RENT = "rent"
    HEALTH = "health"
    SHOPPING = "shopping"
    ENTERTAINMENT = "entertainment"
    BILLS = "bills"
    EDUCATION = "education"
    TRAVEL = "travel"
    OTHER_EXPENSE = "other-expense"


class PaymentMode(Enum):
    CASH = "cash"
    CREDIT_CARD = "credit-card"
    DEBIT_CARD = "debit-card"
    UPI = "upi"
    NET_BANKING = "net-banking"
    WALLET = "wallet"
    OTHER = "other"


INCOME_LABELS: dict[IncomeCategory, str] = {
    IncomeCategory.SALARY: "Salary",
    IncomeCategory.FREELANCE: "Freelance",
    IncomeCategory.INVESTMENT: "Investment Returns",
    IncomeCategory.GIFTS: "Gifts",
    IncomeCategory.REFUNDS: "Refunds",
    IncomeCategory.OTHER_INCOME: "Other Income",
}

EXPENSE_LABELS: dict[ExpenseCategory, str] = {
    ExpenseCategory.FOOD: "Food & Dining",
    ExpenseCategory.TRANSPORT: "Transportation",
    ExpenseCategory.RENT: "Rent",
    ExpenseCategory.HEALTH: "Health & Medical",
    ExpenseCategory.SHOPPING: "Shopping",
    ExpenseCategory.ENTERTAINMENT: "Entertainment",
    ExpenseCategory.BILLS: "Bills & Utilities",
    ExpenseCategory.EDUCATION: "Education",
    ExpenseCategory.TRAVEL: "Travel",
    ExpenseCategory.OTHER_EXPENSE: "Other Expense",
}

PAYMENT_MODE_LABELS: dict[PaymentMode, str] = {
    PaymentMode.CASH: "Cash",
    PaymentMode.CREDIT_CARD: "Credit Card",
    PaymentMode.DEBIT_CARD: "Debit Card",
    PaymentMode.UPI: "UPI",
    PaymentMode.NET_BANKING: "Net Banking",
    PaymentMode.WALLET: "Wallet",
    PaymentMode.OTHER: "Other",
}


def category_label(transaction_type: str, value: str) -> str:
    """Display label for a category value; unknown values are returned as-is."""
    if transaction_type == TransactionType.INCOME.value:
        try:
            return INCOME_LABELS[IncomeCategory(value)]
        except ValueError:
            return value
    if transaction_type == TransactionType.EXPENSE.value:
        try:
            return EXPENSE_LABELS[ExpenseCategory(value)]
        except ValueError:
            return value
    return value


def payment_mode_label(value: str) -> str:
    try:
        return PAYMENT_MODE_LABELS[PaymentMode(value)]
    except ValueError:
        return value
