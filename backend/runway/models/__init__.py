from .tenancy import Organization, Membership
from .auth import User
from .ledger import Transaction, Summary

__all__ = [
    'Organization', 'Membership',
    'User',
    'Transaction', 'Summary',
]
