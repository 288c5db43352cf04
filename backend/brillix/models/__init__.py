from .account import User, USER_ROLES
from .business import Business, INDUSTRIES, CURRENCIES, SUBSCRIPTION_PLANS, SUBSCRIPTION_STATUSES

__all__ = [
    'User', 'USER_ROLES',
    'Business', 'INDUSTRIES', 'CURRENCIES', 'SUBSCRIPTION_PLANS', 'SUBSCRIPTION_STATUSES',
]
