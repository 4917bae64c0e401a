"""Configuration: persisted mappings (YAML/JSON) and the pipeline file, both schema-validated."""

from .loader import DEFAULT_CONFIG_PATH, load_config
from .mapping_io import dump_mapping, load_mapping, mapping_from_dict, mapping_to_dict
from .validation import ConfigError, validate_document

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "load_config",
    "load_mapping",
    "dump_mapping",
    "mapping_from_dict",
    "mapping_to_dict",
    "validate_document",
]
