"""Directory module repository implementations."""

from typing import List, Optional
from repokit.repository.base import BaseRepository
from repokit.repository.inputs import InputBag
from .models import Company, SiteSetting, User, COMPANY_SCHEMA, SITE_SETTING_SCHEMA, USER_SCHEMA


class CompanyRepository(BaseRepository[Company]):
    """Company repository."""

    def __init__(self, session, inputs: Optional[InputBag] = None):
        super().__init__(session, Company, COMPANY_SCHEMA, inputs=inputs)


class UserRepository(BaseRepository[User]):
    """User repository."""

    def __init__(self, session, inputs: Optional[InputBag] = None):
        super().__init__(session, User, USER_SCHEMA, inputs=inputs)

    def get_by_email(self, email: str) -> Optional[User]:
        """Find user by email."""
        return self.find_one_from_array({"email": email}, throws_exception_if_not_found=False)

    def list_by_company(self, company_id: int) -> List[User]:
        """Users of a company, by name."""
        return self.scope("of_company", company_id).order_by("name").get()


class SiteSettingRepository(BaseRepository[SiteSetting]):
    """Repository for the single site settings row."""

    def __init__(self, session, inputs: Optional[InputBag] = None):
        super().__init__(session, SiteSetting, SITE_SETTING_SCHEMA, inputs=inputs)

    def current(self) -> SiteSetting:
        return self.model_unique_instance()
