"""Core business logic package for the expense tracker."""

from .exceptions import InvalidDataError, NotFoundError, PersistenceError, ValidationError
from .filters import FilterCriteria, filter_expenses
from .models import EXPENSE_CATEGORIES, Expense
from .services import DashboardService, ExpenseService
from .storage import JSONStorage

__all__ = [
    "EXPENSE_CATEGORIES",
    "Expense",
    "FilterCriteria",
    "filter_expenses",
    "DashboardService",
    "ExpenseService",
    "JSONStorage",
    "InvalidDataError",
    "NotFoundError",
    "PersistenceError",
    "ValidationError",
]
