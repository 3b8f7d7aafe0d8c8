"""
Variant configurations on disk: a named list of selected features.

    {"name": "justA", "selected": ["A"], "select_all": false}
"""
from pathlib import Path

from varevo.schemas.variants import Configuration, Variant

from .file_ops import read_json, write_json


def configuration_to_dict(variant: Variant) -> dict:
    return {
        "name": variant.name,
        "selected": variant.configuration.sorted_features(),
        "select_all": variant.configuration.select_all,
    }


def configuration_from_dict(data: dict) -> Variant:
    return Variant(
        name=data["name"],
        configuration=Configuration(
            selected=data.get("selected", []),
            select_all=data.get("select_all", False),
        ),
    )


def write_configuration(variant: Variant, path: Path | str) -> None:
    write_json(path, configuration_to_dict(variant))


def read_configuration(path: Path | str) -> Variant:
    """
    Raises:
        FileNotFoundError: no readable configuration at ``path``
    """
    data = read_json(path)
    if data is None:
        raise FileNotFoundError(f"Configuration not found: {path}")
    return configuration_from_dict(data)
