from .user import User
from .household import Household
from .household_membership import HouseholdMembership
from .staff_invite import StaffInvite
from .user_color import UserColor
from .task import Task


__all__ = [
    "User",
    "Household",
    "HouseholdMembership",
    "StaffInvite",
    "UserColor",
    "Task",
]
