"""
Declarative file and image configuration of a repository.

Entries live in ``settings.REPOSITORY_FILES`` under a config key, e.g.::

    {
        "users": {
            "images": {
                "photo": {
                    "name": "user-photo",
                    "authorized_extensions": ["jpg", "jpeg", "png"],
                    "available_sizes": {"admin": {"width": 40, "height": 40}},
                },
            },
            "files": {},
            "json_storage": false,
            "storage_path": "app/users",
            "public_path": "app/users",
        }
    }

The image codec itself lives outside this package; only the configuration
is checked here, at repository construction.
"""

import re
import unicodedata
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, StrictBool, ValidationError, field_validator, model_validator

from repokit.exceptions.handler import InvalidConfiguration
from repokit.logging.logger import get_logger

logger = get_logger("files")


def slugify(value: str) -> str:
    """ASCII, lowercase, dash-separated form of ``value``."""
    value = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")


def split_image_name(image_name: str) -> Tuple[str, str]:
    """Slugified stem and lowercase extension of an image file name."""
    path = Path(image_name)
    extension = path.suffix.lstrip(".").lower()
    if not extension:
        raise ValueError(f'The given image "{image_name}" has no extension.')
    return slugify(path.stem), extension


class ImageSize(BaseModel):
    width: Optional[int]
    height: Optional[int]

    @model_validator(mode="after")
    def _one_dimension_required(self):
        if not self.width and not self.height:
            raise ValueError("both width and height are null")
        return self


class FileTypeConfig(BaseModel):
    name: str
    authorized_extensions: List[str]

    @field_validator("name")
    @classmethod
    def _name_required(cls, value: str) -> str:
        if not value:
            raise ValueError('no defined "name" value')
        return value

    @field_validator("authorized_extensions")
    @classmethod
    def _extensions_required(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError('no defined "authorized_extensions" value')
        return [extension.lower().lstrip(".") for extension in value]


class ImageTypeConfig(FileTypeConfig):
    available_sizes: Dict[str, ImageSize]

    @field_validator("available_sizes")
    @classmethod
    def _sizes_required(cls, value: Dict[str, ImageSize]) -> Dict[str, ImageSize]:
        if not value:
            raise ValueError('no defined "available_sizes" value')
        return value


class RepositoryFilesConfig(BaseModel):
    config_key: str
    images: Dict[str, ImageTypeConfig] = {}
    files: Dict[str, FileTypeConfig] = {}
    json_storage: StrictBool
    storage_path: str
    public_path: str

    @field_validator("storage_path", "public_path")
    @classmethod
    def _path_required(cls, value: str) -> str:
        if not value:
            raise ValueError("path must not be empty")
        return value

    def image_config(self, image_key: str) -> ImageTypeConfig:
        if image_key not in self.images:
            raise ValueError(
                f'The image key "{image_key}" does not exist in the "{self.config_key}.images" configuration.'
            )
        return self.images[image_key]

    def image_size(self, image_key: str, size_key: str) -> ImageSize:
        sizes = self.image_config(image_key).available_sizes
        if size_key not in sizes:
            raise ValueError(
                f'The size key "{size_key}" does not exist in the '
                f'"{self.config_key}.images.{image_key}" configuration.'
            )
        return sizes[size_key]

    def image_size_width(self, image_key: str, size_key: str) -> Optional[int]:
        return self.image_size(image_key, size_key).width

    def image_size_height(self, image_key: str, size_key: str) -> Optional[int]:
        return self.image_size(image_key, size_key).height

    def image_max_width(self, image_key: str) -> Optional[int]:
        sizes = self.image_config(image_key).available_sizes.values()
        return max((size.width or 0 for size in sizes), default=0) or None

    def image_max_height(self, image_key: str) -> Optional[int]:
        sizes = self.image_config(image_key).available_sizes.values()
        return max((size.height or 0 for size in sizes), default=0) or None

    def authorized_extensions(self, key: str) -> List[str]:
        if key in self.images:
            return self.images[key].authorized_extensions
        if key in self.files:
            return self.files[key].authorized_extensions
        raise ValueError(f'The key "{key}" does not exist in the "{self.config_key}" configuration.')

    def readable_authorized_extensions(self, key: str, without_spaces: bool = False) -> str:
        separator = "," if without_spaces else ", "
        return separator.join(self.authorized_extensions(key))

    def storage_file_path(self, path: Optional[str] = None) -> Path:
        base = Path(self.storage_path)
        return base / path if path else base

    def public_file_path(self, path: Optional[str] = None) -> Path:
        base = Path(self.public_path)
        return base / path if path else base

    def image_path(self, image_name: str, size_key: Optional[str] = None) -> Path:
        """Public path of an image, or of its ``<slug>-<size>.<ext>`` variant."""
        if not size_key:
            return self.public_file_path(image_name)
        stem, extension = split_image_name(image_name)
        return self.public_file_path(f"{stem}-{size_key}.{extension}")

    def destroy_image(self, image_key: str, image_name: str) -> None:
        """Delete a stored image and every configured size variant of it."""
        stem, extension = split_image_name(image_name)
        sizes = self.image_config(image_key).available_sizes
        targets = [self.storage_file_path(f"{stem}-{size_key}.{extension}") for size_key in sizes]
        targets.append(self.storage_file_path(image_name))
        for target in targets:
            if not target.is_file():
                continue
            target.unlink()
            if target.is_file():
                raise OSError(f"The image removal went wrong. The image {target} still exists.")
            logger.info(f"Deleted image {target}")


def _describe(error: ValidationError, config_key: str) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    return f'The config "{config_key}.{location}" is invalid: {first["msg"]}'


def load_files_config(config_key: str, configs: Mapping[str, Any]) -> RepositoryFilesConfig:
    """Validate the entry stored under ``config_key``; raise InvalidConfiguration otherwise."""
    if config_key not in configs or configs[config_key] is None:
        raise InvalidConfiguration(f'The config "{config_key}" does not exist.', config_path=config_key)
    raw = configs[config_key]
    if not isinstance(raw, Mapping):
        raise InvalidConfiguration(f'The config "{config_key}" must be a mapping.', config_path=config_key)
    try:
        return RepositoryFilesConfig(config_key=config_key, **raw)
    except ValidationError as e:
        raise InvalidConfiguration(_describe(e, config_key), config_path=config_key) from e
