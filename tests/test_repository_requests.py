"""
Request-sourced operations: input shaping, then the array-based writes.
"""
import pytest
from sqlalchemy.exc import IntegrityError

from apps.directory.models import Company, COMPANY_SCHEMA
from repokit.repository.base import BaseRepository
from repokit.repository.inputs import InputBag


class CompanyRepositoryWithDisabledDefaultExclusions(BaseRepository[Company]):
    except_default_attributes = False

    def __init__(self, session, inputs=None):
        super().__init__(session, Company, COMPANY_SCHEMA, inputs=inputs)


class CompanyRepositoryWithCustomDefaultExclusions(BaseRepository[Company]):
    default_attributes_to_except = ("name",)

    def __init__(self, session, inputs=None):
        super().__init__(session, Company, COMPANY_SCHEMA, inputs=inputs)


def test_create_multiple_from_request(user_repository, user_data):
    records = {"0": user_data(), "1": user_data(), "2": user_data()}
    user_repository.set_inputs(InputBag(records))
    users = user_repository.create_multiple_from_request()
    assert len(users) == 3
    for index, user in enumerate(users):
        assert user.name == records[str(index)]["name"]
        assert user.email == records[str(index)]["email"]
        assert user.password == records[str(index)]["password"]


def test_create_multiple_from_request_with_exclusions_and_additions(user_repository, user_data):
    data = {
        "_token": "token",
        "_method": "update",
        "0": user_data(),
        "1": user_data(),
        "2": user_data(),
    }
    user_repository.set_inputs(InputBag(data))
    users = user_repository.create_multiple_from_request(
        {"0.name": "Michel", "0.remember_token": "token"},
        ["1", "2"],
    )
    assert len(users) == 1
    assert users[0].name == "Michel"
    assert users[0].email == data["0"]["email"]
    assert users[0].password == data["0"]["password"]
    assert users[0].remember_token == "token"


def test_shaping_leaves_input_untouched(user_repository, user_data):
    inputs = InputBag({"_token": "token", **user_data()})
    user_repository.set_inputs(inputs)
    shaped = user_repository.shape_input({"name": "Jean"}, ["email"])
    assert shaped == {"name": "Jean", "password": "hashed-1"}
    assert inputs.input("_token") == "token"
    assert inputs.input("name") == "User 001"


def test_create_single_from_request(user_repository, user_data):
    data = user_data(_token="token", _method="post")
    user_repository.set_inputs(InputBag(data))
    user = user_repository.create_or_update_from_request()
    assert (user.name, user.email, user.password) == (data["name"], data["email"], data["password"])


def test_update_single_from_request(user_repository, create_users):
    user = create_users(1)[0]
    data = user_repository.to_dict(user)
    data.update(name="Jean", remember_token="token", password=user.password)
    user_repository.set_inputs(InputBag(data))
    updated = user_repository.create_or_update_from_request()
    assert updated.id == user.id
    assert updated.name == "Jean"
    assert updated.email == user.email
    assert updated.remember_token == "token"


def test_update_from_request_with_nested_replacement(user_repository, create_users):
    user = create_users(1, remember_token="old")[0]
    user_repository.set_inputs(InputBag({"user": {"id": user.id, "name": "Jean"}}))
    shaped = user_repository.shape_input({"user.name": "Paul", "user.email": "paul@example.com"})
    assert shaped == {"user": {"id": user.id, "name": "Paul", "email": "paul@example.com"}}

    user_repository.set_inputs(InputBag({"id": str(user.id), "name": "Jean"}))
    updated = user_repository.create_or_update_from_request(
        {"name": "Paul"}, missing_fillable_attributes_to_null=False
    )
    assert updated.name == "Paul"
    assert updated.remember_token == "old"


def test_create_or_update_multiple_from_request(user_repository, create_users, user_data):
    user = create_users(1)[0]
    data = {"0": user_data(id=user.id, name="Updated"), "1": user_data(name="Created")}
    user_repository.set_inputs(InputBag(data))
    saved = user_repository.create_or_update_multiple_from_request()
    assert [record.name for record in saved] == ["Updated", "Created"]
    assert saved[0].id == user.id
    assert user_repository.count() == 2


def test_delete_from_request(user_repository, create_users):
    user = create_users(1)[0]
    user_repository.set_inputs(InputBag({"_token": "token", "id": user.id}))
    assert user_repository.delete_from_request() is True
    assert user_repository.get() == []


def test_disabled_default_exclusions_keep_transport_fields(session):
    data = {"_token": "token", "_method": "update", "name": "Acme"}
    repository = CompanyRepositoryWithDisabledDefaultExclusions(session, inputs=InputBag(data))
    assert repository.shape_input() == data
    company = repository.create_or_update_from_request()
    assert company.name == "Acme"


def test_custom_default_exclusions_replace_the_configured_ones(session):
    data = {"_token": "token", "_method": "update", "name": "Acme"}
    repository = CompanyRepositoryWithCustomDefaultExclusions(session, inputs=InputBag(data))
    assert repository.shape_input() == {"_token": "token", "_method": "update"}
    with pytest.raises(IntegrityError):
        repository.create_or_update_from_request()
