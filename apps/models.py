"""
Model registration: import every table model so SQLModel metadata knows it before create_all().
When adding/removing apps, add/remove the corresponding imports here.
"""
from apps.directory.models import Company, SiteSetting, User

__all__ = ["Company", "SiteSetting", "User"]
