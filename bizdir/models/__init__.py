from bizdir.models.account import Account
from bizdir.models.business import Business, BusinessPhoto

__all__ = [
    "Account",
    "Business",
    "BusinessPhoto",
]
