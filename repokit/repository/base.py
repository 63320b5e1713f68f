"""
Repository abstract base class and generic implementation.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, Iterable, List, Mapping, Optional, Sequence, Type, TypeVar, Union

from sqlalchemy import func
from sqlmodel import SQLModel, Session, select

from repokit.config import settings
from repokit.exceptions.handler import NoModelConfigured, NotFound
from repokit.files.config import RepositoryFilesConfig, load_files_config
from repokit.logging.logger import get_logger

from .attributes import expand_dot_keys, replace_recursive
from .inputs import InputBag
from .pagination import Page, offset_for, paginate_list
from .query import MISSING, QuerySpec, build_select, resolve_column
from .schema import EntitySchema

T = TypeVar("T", bound=SQLModel)


class IRepository(ABC, Generic[T]):
    """Repository interface; defines the primary-key driven write API."""

    @abstractmethod
    def create_or_update_from_array(self, data: Mapping[str, Any], missing_fillable_attributes_to_null: bool = True) -> T:
        """Create, or update when data carries a stored primary key."""
        pass

    @abstractmethod
    def update_by_primary(self, primary: Any, data: Mapping[str, Any], missing_fillable_attributes_to_null: bool = True) -> T:
        """Update entity addressed by primary key."""
        pass

    @abstractmethod
    def delete_by_primary(self, primary: Any) -> bool:
        """Delete entity addressed by primary key."""
        pass

    @abstractmethod
    def find_one_by_primary(self, primary: Any, throws_exception_if_not_found: bool = True) -> Optional[T]:
        """Get entity by primary key."""
        pass

    @abstractmethod
    def make(self, data: Mapping[str, Any]) -> T:
        """Instantiate an unsaved entity."""
        pass


class BaseRepository(IRepository[T]):
    """
    Generic SQLModel repository.

    Fluent calls (``where``, ``order_by``, ``with_`` ...) build an immutable
    ``QuerySpec``. Terminal calls (``get``, ``first``, ``all``, ``paginate``,
    ``find``, ``find_by``, ``delete``, ``count``) swap in an empty spec before
    running, so one repository instance can serve unrelated queries.

    The repository flushes but never commits; transaction boundaries belong to
    ``UnitOfWork``. Lookup-then-write operations are not atomic.
    """

    # None falls back to settings.REPOSITORY_DEFAULT_ATTRIBUTES_TO_EXCEPT
    default_attributes_to_except: Optional[Sequence[str]] = None
    except_default_attributes: bool = True
    # Key in settings.REPOSITORY_FILES holding this repository's files config
    config_key: Optional[str] = None

    def __init__(
        self,
        session: Session,
        model: Optional[Type[T]] = None,
        schema: Optional[EntitySchema] = None,
        inputs: Optional[InputBag] = None,
    ):
        """Initialize repository with session, model, its schema and request input."""
        self.session = session
        self.model: Optional[Type[T]] = None
        self.schema: Optional[EntitySchema] = None
        self.inputs = inputs if inputs is not None else InputBag()
        self._query = QuerySpec()
        self.logger = get_logger(type(self).__name__)
        if model is not None:
            self.set_model(model, schema)

        self.files_config: Optional[RepositoryFilesConfig] = None
        self.json_store = None
        if self.config_key:
            self.files_config = load_files_config(self.config_key, settings.REPOSITORY_FILES)
            if self.files_config.json_storage:
                from repokit.files.json_store import JsonAttributeStore
                self.json_store = JsonAttributeStore(self.files_config.storage_file_path())

    def set_model(self, model: Type[T], schema: EntitySchema) -> "BaseRepository[T]":
        """Bind another model; pending clauses belong to the previous one and are dropped."""
        if schema is None:
            raise ValueError(f"{type(self).__name__} : a schema is required for model {model.__name__}.")
        self.model = model
        self.schema = schema
        self._query = QuerySpec()
        return self

    def set_inputs(self, inputs: InputBag) -> "BaseRepository[T]":
        self.inputs = inputs
        return self

    # ------------------------------------------------------------------
    # Clause accumulation
    # ------------------------------------------------------------------

    @property
    def query(self) -> QuerySpec:
        """Pending clauses, as an immutable value."""
        return self._query

    def where(self, column: str, operator: Any, value: Any = MISSING) -> "BaseRepository[T]":
        self._query = self._query.where(column, operator, value)
        return self

    def where_in(self, column: str, values: Any) -> "BaseRepository[T]":
        self._query = self._query.where_in(column, values)
        return self

    def order_by(self, column: str, direction: str = "asc") -> "BaseRepository[T]":
        self._query = self._query.order_by(column, direction)
        return self

    def take(self, limit: int) -> "BaseRepository[T]":
        self._query = self._query.take(limit)
        return self

    def skip(self, offset: int) -> "BaseRepository[T]":
        self._query = self._query.skip(offset)
        return self

    def per_page(self, per_page: int) -> "BaseRepository[T]":
        self._query = self._query.paginate_by(per_page)
        return self

    def with_(self, relations: Union[str, Sequence[str]]) -> "BaseRepository[T]":
        """Eager-load relations. Replaces, does not extend, a previous call."""
        self._query = self._query.with_(relations)
        return self

    def scope(self, name: str, *args: Any) -> "BaseRepository[T]":
        """Apply the model's ``scope_<name>(statement, *args)`` on execution."""
        self._query = self._query.scope(name, *args)
        return self

    def _take_query(self) -> QuerySpec:
        spec, self._query = self._query, QuerySpec()
        if self.model is None:
            raise NoModelConfigured(type(self).__name__)
        return spec

    def _ensure_model(self) -> None:
        if self.model is None:
            raise NoModelConfigured(type(self).__name__)

    def _not_found(self, key: Any = None, message: str = None) -> NotFound:
        error = NotFound(self.model.__name__, key, message=message)
        self.logger.debug(error.message)
        return error

    @property
    def _primary_column(self):
        return resolve_column(self.model, self.schema.primary_key)

    # ------------------------------------------------------------------
    # Terminal operations
    # ------------------------------------------------------------------

    def first(self) -> T:
        spec = self._take_query()
        record = self.session.exec(build_select(self.model, spec)).first()
        if record is None:
            raise self._not_found()
        return record

    def get(self, columns: Optional[Sequence[str]] = None) -> List[T]:
        spec = self._take_query()
        self.logger.debug(f"get {self.model.__name__} with {spec}")
        return list(self.session.exec(build_select(self.model, spec, columns=columns)).all())

    def all(self, columns: Optional[Sequence[str]] = None) -> List[T]:
        """Every record; only eager-loads are honoured, other pending clauses are dropped."""
        spec = self._take_query()
        return list(self.session.exec(build_select(self.model, spec.without_clauses(), columns=columns)).all())

    def count(self) -> int:
        spec = self._take_query()
        statement = build_select(self.model, spec, eager=False, ordering=False)
        return self.session.exec(select(func.count()).select_from(statement.subquery())).one()

    def paginate(self, per_page: Optional[int] = None, columns: Optional[Sequence[str]] = None) -> Page:
        """Page of the filtered records; the page number comes from the input's ``page``."""
        spec = self._take_query()
        per_page = per_page or spec.per_page or settings.REPOSITORY_DEFAULT_PER_PAGE
        current_page = self.inputs.current_page()

        filtered = build_select(self.model, spec, eager=False, ordering=False, limits=False)
        total = self.session.exec(select(func.count()).select_from(filtered.subquery())).one()

        statement = build_select(self.model, spec, limits=False, columns=columns)
        statement = statement.limit(per_page).offset(offset_for(current_page, per_page))
        items = list(self.session.exec(statement).all())

        return Page(
            items=items,
            total=total,
            per_page=per_page,
            current_page=current_page,
            path=self.inputs.path,
            query=self.inputs.query_without("page"),
        )

    def find_by(self, column: str, value: Any) -> T:
        spec = self._take_query()
        statement = build_select(self.model, spec.without_clauses())
        record = self.session.exec(statement.where(resolve_column(self.model, column) == value)).first()
        if record is None:
            raise self._not_found(f"{column}={value}")
        return record

    def find(self, primary: Any) -> T:
        spec = self._take_query()
        primary = self.schema.coerce_key(primary)
        statement = build_select(self.model, spec.without_clauses())
        record = self.session.exec(statement.where(self._primary_column == primary)).first()
        if record is None:
            raise self._not_found(primary)
        return record

    def delete(self) -> int:
        """Delete every record matching the pending wheres, where-ins and scopes."""
        spec = self._take_query()
        statement = build_select(self.model, spec, eager=False, ordering=False, limits=False)
        records = list(self.session.exec(statement).all())
        for record in records:
            self.session.delete(record)
        self.session.flush()
        self.logger.info(f"Deleted {len(records)} {self.model.__name__} record(s) from query")
        return len(records)

    # ------------------------------------------------------------------
    # Writes and lookups by primary key
    # ------------------------------------------------------------------

    def _primary_from(self, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return None
        value = data.get(self.schema.primary_key)
        if value is None or value == "":
            return None
        return self.schema.coerce_key(value)

    def _fill(self, instance: T, data: Mapping[str, Any]) -> T:
        for attribute, value in self.schema.fillable_from(data).items():
            setattr(instance, attribute, value)
        return instance

    def make(self, data: Mapping[str, Any]) -> T:
        """Unsaved instance filled with the fillable keys of ``data``."""
        self._ensure_model()
        return self.model(**self.schema.fillable_from(data))

    def create(self, data: Mapping[str, Any]) -> T:
        instance = self.make(data)
        self.session.add(instance)
        self.session.flush()
        self.session.refresh(instance)
        self.logger.info(f"Created {self.model.__name__} #{getattr(instance, self.schema.primary_key)}")
        return instance

    def set_missing_fillable_attributes_to_null(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Map spanning exactly the fillable attributes; absent ones are None."""
        return {attribute: data.get(attribute) for attribute in self.schema.fillable}

    def update_by_primary(
        self,
        primary: Any,
        data: Mapping[str, Any],
        missing_fillable_attributes_to_null: bool = True,
    ) -> T:
        instance = self.find_one_by_primary(primary)
        if missing_fillable_attributes_to_null:
            data = self.set_missing_fillable_attributes_to_null(data)
        self._fill(instance, data)
        self.session.add(instance)
        self.session.flush()
        self.session.refresh(instance)
        self.logger.info(f"Updated {self.model.__name__} #{primary}")
        return instance

    def create_or_update_from_array(
        self,
        data: Mapping[str, Any],
        missing_fillable_attributes_to_null: bool = True,
    ) -> T:
        self._ensure_model()
        primary = self._primary_from(data)
        if primary is not None and self.find_one_by_primary(primary, throws_exception_if_not_found=False):
            return self.update_by_primary(primary, data, missing_fillable_attributes_to_null)
        return self.create(data)

    @staticmethod
    def _records_of(data: Union[Mapping[str, Any], Iterable[Mapping[str, Any]]]) -> List[Mapping[str, Any]]:
        if isinstance(data, Mapping):
            return list(data.values())
        return list(data)

    def create_multiple_from_array(self, data: Union[Mapping[str, Any], Iterable[Mapping[str, Any]]]) -> List[T]:
        return [self.create(record) for record in self._records_of(data)]

    def create_or_update_multiple_from_array(
        self,
        data: Union[Mapping[str, Any], Iterable[Mapping[str, Any]]],
        missing_fillable_attributes_to_null: bool = True,
    ) -> List[T]:
        return [
            self.create_or_update_from_array(record, missing_fillable_attributes_to_null)
            for record in self._records_of(data)
        ]

    def find_one_by_primary(self, primary: Any, throws_exception_if_not_found: bool = True) -> Optional[T]:
        try:
            return self.find(primary)
        except NotFound:
            if throws_exception_if_not_found:
                raise
            return None

    def find_one_from_array(self, data: Mapping[str, Any], throws_exception_if_not_found: bool = True) -> Optional[T]:
        for column, value in data.items():
            self.where(column, "=", value)
        try:
            return self.first()
        except NotFound:
            if throws_exception_if_not_found:
                raise
            return None

    def find_multiple_from_array(self, data: Mapping[str, Any]) -> List[T]:
        for column, value in data.items():
            self.where(column, "=", value)
        return self.get()

    def find_multiple_from_ids(self, ids: Iterable[Any]) -> List[T]:
        self._ensure_model()
        keys = [self.schema.coerce_key(key) for key in ids]
        return self.where_in(self.schema.primary_key, keys).get()

    def get_all(
        self,
        columns: Optional[Sequence[str]] = None,
        order_by: str = "default",
        direction: str = "asc",
    ) -> List[T]:
        """Every record ordered by ``order_by`` (``"default"`` is the primary key)."""
        self._ensure_model()
        column = self.schema.primary_key if order_by == "default" else order_by
        return self.order_by(column, direction).get(columns=columns)

    def delete_by_primary(self, primary: Any) -> bool:
        instance = self.find_one_by_primary(primary)
        self.session.delete(instance)
        self.session.flush()
        self.logger.info(f"Deleted {self.model.__name__} #{primary}")
        return True

    def delete_from_array(self, data: Mapping[str, Any]) -> bool:
        self._ensure_model()
        primary = self._primary_from(data)
        if primary is None:
            raise self._not_found(
                message=f'The data does not contain the "{self.schema.primary_key}" '
                        f'primary key value of model [{self.model.__name__}].'
            )
        return self.delete_by_primary(primary)

    def delete_multiple_from_primaries(self, primaries: Iterable[Any]) -> int:
        """Delete the records that exist among ``primaries``; unknown keys are skipped."""
        self._ensure_model()
        keys = [self.schema.coerce_key(key) for key in primaries]
        if not keys:
            return 0
        records = list(self.session.exec(select(self.model).where(self._primary_column.in_(keys))).all())
        for record in records:
            self.session.delete(record)
        self.session.flush()
        self.logger.info(f"Deleted {len(records)}/{len(keys)} {self.model.__name__} record(s) by primary key")
        return len(records)

    def model_unique_instance(self) -> T:
        """The single stored row of a settings-like model, created empty if missing."""
        self._ensure_model()
        statement = select(self.model).order_by(self._primary_column).limit(1)
        instance = self.session.exec(statement).first()
        return instance if instance is not None else self.create({})

    def paginate_array_results(self, data: Sequence[Any], per_page: int = 20) -> Page:
        return paginate_list(
            data,
            per_page,
            current_page=self.inputs.current_page(),
            path=self.inputs.path,
            query=self.inputs.query_without("page"),
        )

    def to_dict(self, instance: T) -> Dict[str, Any]:
        """Plain data for an instance, without the schema's hidden attributes."""
        return instance.model_dump(exclude=set(self.schema.hidden))

    # ------------------------------------------------------------------
    # Request-sourced operations
    # ------------------------------------------------------------------

    def _attributes_to_except(self, attributes_to_except: Optional[Iterable[str]]) -> List[str]:
        keys = list(attributes_to_except or [])
        if self.except_default_attributes:
            defaults = self.default_attributes_to_except
            if defaults is None:
                defaults = settings.REPOSITORY_DEFAULT_ATTRIBUTES_TO_EXCEPT
            keys = list(defaults) + keys
        return keys

    def shape_input(
        self,
        attributes_to_add_or_replace: Optional[Mapping[str, Any]] = None,
        attributes_to_except: Optional[Iterable[str]] = None,
    ) -> Dict[str, Any]:
        """Input data without excepted dot paths, then with the dot-keyed overrides merged in."""
        data = self.inputs.except_(self._attributes_to_except(attributes_to_except))
        if attributes_to_add_or_replace:
            data = replace_recursive(data, expand_dot_keys(attributes_to_add_or_replace))
        return data

    def create_multiple_from_request(
        self,
        attributes_to_add_or_replace: Optional[Mapping[str, Any]] = None,
        attributes_to_except: Optional[Iterable[str]] = None,
    ) -> List[T]:
        data = self.shape_input(attributes_to_add_or_replace, attributes_to_except)
        return self.create_multiple_from_array(data)

    def create_or_update_from_request(
        self,
        attributes_to_add_or_replace: Optional[Mapping[str, Any]] = None,
        attributes_to_except: Optional[Iterable[str]] = None,
        missing_fillable_attributes_to_null: bool = True,
    ) -> T:
        data = self.shape_input(attributes_to_add_or_replace, attributes_to_except)
        return self.create_or_update_from_array(data, missing_fillable_attributes_to_null)

    def create_or_update_multiple_from_request(
        self,
        attributes_to_add_or_replace: Optional[Mapping[str, Any]] = None,
        attributes_to_except: Optional[Iterable[str]] = None,
        missing_fillable_attributes_to_null: bool = True,
    ) -> List[T]:
        data = self.shape_input(attributes_to_add_or_replace, attributes_to_except)
        return self.create_or_update_multiple_from_array(data, missing_fillable_attributes_to_null)

    def delete_from_request(
        self,
        attributes_to_add_or_replace: Optional[Mapping[str, Any]] = None,
        attributes_to_except: Optional[Iterable[str]] = None,
    ) -> bool:
        data = self.shape_input(attributes_to_add_or_replace, attributes_to_except)
        return self.delete_from_array(data)
