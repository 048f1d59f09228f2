"""YAML serialization of test definitions."""

from plansmith.infrastructure.serialization.yaml_serializer import (
    DEFAULT_TEST_NAME,
    config_from_document,
    config_from_test_details,
    deserialize_task,
    deserialize_test,
    format_duration,
    format_yaml,
    serialize_task,
    serialize_test,
    task_from_document,
    task_to_document,
    test_to_document,
    validate_yaml_syntax,
)

__all__ = [
    "DEFAULT_TEST_NAME",
    "serialize_test",
    "deserialize_test",
    "serialize_task",
    "deserialize_task",
    "test_to_document",
    "task_to_document",
    "task_from_document",
    "config_from_document",
    "config_from_test_details",
    "validate_yaml_syntax",
    "format_yaml",
    "format_duration",
]
