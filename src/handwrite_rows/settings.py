# -*- coding: utf-8 -*-
import json
from dataclasses import asdict, dataclass, fields
from typing import List

from .export import DEFAULT_EXPORT_NAME
from .row_parser import DelimiterPolicy, parse_columns, parse_policy

DEFAULT_CONFIG_PATH = "config.json"


@dataclass
class AppSettings:
    """Holds the user-editable table and OCR settings."""
    columns: str = "Item, Quantity, Price"
    delimiter: str = DelimiterPolicy.AUTO.value
    custom_pattern: str = ""

    language: str = "en"
    use_angle_cls: bool = True

    export_name: str = DEFAULT_EXPORT_NAME

    def policy(self) -> DelimiterPolicy:
        """The validated delimiter policy; unknown names fall back to auto."""
        try:
            return parse_policy(self.delimiter)
        except ValueError:
            return DelimiterPolicy.AUTO

    def column_labels(self) -> List[str]:
        return parse_columns(self.columns)


def load_config(path: str = DEFAULT_CONFIG_PATH) -> AppSettings:
    """Loads settings from a JSON file."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError, UnicodeDecodeError):
        # Return default settings if file is missing or corrupt
        return AppSettings()
    return settings_from_dict(data)


def settings_from_dict(data) -> AppSettings:
    """
    Builds settings from decoded JSON. Unknown keys are ignored and a value of
    the wrong type keeps that field's default.
    """
    if not isinstance(data, dict):
        return AppSettings()
    defaults = AppSettings()
    values = {}
    for field in fields(AppSettings):
        if field.name not in data:
            continue
        value = data[field.name]
        # bool is an int subclass, so compare exact types.
        if type(value) is type(getattr(defaults, field.name)):
            values[field.name] = value
    return AppSettings(**values)


def save_config(settings: AppSettings, path: str = DEFAULT_CONFIG_PATH):
    """Saves settings to a JSON file."""
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(asdict(settings), f, indent=4)
