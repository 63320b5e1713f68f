from typing import List, Optional
from sqlmodel import SQLModel, Field, Relationship
from repokit.repository.schema import EntitySchema

class Company(SQLModel, table=True):
    __tablename__ = "companies"
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    users: List["User"] = Relationship(back_populates="company")

    @classmethod
    def scope_named(cls, statement, name: str):
        return statement.where(cls.name == name)

class User(SQLModel, table=True):
    __tablename__ = "users"
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    email: str = Field(unique=True, index=True)
    password: str
    remember_token: Optional[str] = None
    company_id: Optional[int] = Field(default=None, foreign_key="companies.id")
    company: Optional[Company] = Relationship(back_populates="users")

    @classmethod
    def scope_of_company(cls, statement, company_id: int):
        return statement.where(cls.company_id == company_id)

    @classmethod
    def scope_email_domain(cls, statement, domain: str):
        return statement.where(cls.email.like(f"%@{domain}"))

class SiteSetting(SQLModel, table=True):
    """Single-row settings table, read through model_unique_instance()."""
    __tablename__ = "site_settings"
    id: Optional[int] = Field(default=None, primary_key=True)
    site_name: Optional[str] = None
    contact_email: Optional[str] = None
    maintenance: Optional[bool] = Field(default=False)


COMPANY_SCHEMA = EntitySchema(fillable=("name",))
USER_SCHEMA = EntitySchema(
    fillable=("name", "email", "password", "remember_token", "company_id"),
    hidden=("password", "remember_token"),
)
SITE_SETTING_SCHEMA = EntitySchema(fillable=("site_name", "contact_email", "maintenance"))
