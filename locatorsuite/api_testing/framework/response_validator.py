# ================================================================================
# Response Validator
# ================================================================================
#
# Batch validation of httpx responses. Every violation is collected before a
# single API_ERROR is raised, so a failing test reports all mismatches at once.
#
# Key Features:
#   - Status / required property / exact value checks in one call
#   - Lightweight type schema ({"id": "number", "name": "string"})
#   - Allure validation summary attachment
#
# ================================================================================

from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import allure
import httpx
from loguru import logger

from locatorsuite.ui_testing.framework.exceptions import ClassifiedError, ErrorType


# Schema type names accepted by validate_schema
SCHEMA_TYPES: Dict[str, tuple] = {
    "string": (str,),
    "number": (int, float),
    "integer": (int,),
    "boolean": (bool,),
    "object": (dict,),
    "array": (list,),
    "null": (type(None),),
}


def _body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _matches_type(value: Any, expected: Union[str, type]) -> bool:
    if isinstance(expected, type):
        types = (expected,)
    else:
        types = SCHEMA_TYPES.get(expected)
        if types is None:
            raise ValueError(f"Unknown schema type: {expected}")
    # bool is an int subclass
    if isinstance(value, bool) and bool not in types:
        return False
    return isinstance(value, types)


def _type_name(value: Any) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    for name, types in SCHEMA_TYPES.items():
        if isinstance(value, types):
            return name
    return type(value).__name__


def _same_value(actual: Any, expected: Any) -> bool:
    """Equality without bool/number coercion (1 != True), int and float interchangeable."""
    if isinstance(actual, bool) or isinstance(expected, bool):
        return type(actual) is type(expected) and actual == expected
    numbers = (int, float)
    if isinstance(actual, numbers) and isinstance(expected, numbers):
        return actual == expected
    if type(actual) is not type(expected):
        return False
    if isinstance(expected, dict):
        return actual.keys() == expected.keys() and all(
            _same_value(actual[k], v) for k, v in expected.items()
        )
    if isinstance(expected, list):
        return len(actual) == len(expected) and all(
            _same_value(a, e) for a, e in zip(actual, expected)
        )
    return actual == expected


def _as_list(properties: Optional[Iterable[str]]) -> List[str]:
    # A bare key name is one property, not a sequence of characters
    if isinstance(properties, str):
        return [properties]
    return list(properties or ())


def _attach_validation_summary(checks: int, errors: List[str]) -> None:
    """Attach validation summary to Allure report."""
    summary_lines = [
        f"Total Checks: {checks}",
        f"Failed: {len(errors)}",
    ]
    if errors:
        summary_lines += ["", "Details:", "-" * 40]
        summary_lines += [f"❌ FAIL | {error}" for error in errors]

    allure.attach(
        "\n".join(summary_lines),
        name="Validation Summary",
        attachment_type=allure.attachment_type.TEXT,
    )


def collect_errors(
    response: httpx.Response,
    status: Optional[int] = None,
    properties: Optional[Iterable[str]] = None,
    values: Optional[Mapping[str, Any]] = None,
) -> List[str]:
    """Return every violation of the given expectations, in check order."""
    errors: List[str] = []
    body = _body(response)
    fields = body if isinstance(body, dict) else {}

    if status is not None and response.status_code != status:
        errors.append(f"Expected status {status}, got {response.status_code}")

    for prop in _as_list(properties):
        if prop not in fields:
            errors.append(f"Missing property: {prop}")

    for key, expected in (values or {}).items():
        actual = fields.get(key)
        if not _same_value(actual, expected):
            errors.append(f"Expected {key} to be {expected}, got {actual}")

    return errors


def validate_response(
    response: httpx.Response,
    status: Optional[int] = None,
    properties: Optional[Iterable[str]] = None,
    values: Optional[Mapping[str, Any]] = None,
) -> None:
    """
    Validate a response against all expectations at once.

    Args:
        response: httpx response under test
        status: Expected status code
        properties: Top-level body keys that must be present
        values: Top-level body keys with their exact expected values

    Raises:
        ClassifiedError: API_ERROR listing every violation in details["errors"]
    """
    properties = _as_list(properties)
    values = dict(values or {})
    errors = collect_errors(response, status, properties, values)
    checks = (1 if status is not None else 0) + len(properties) + len(values)
    _attach_validation_summary(checks, errors)

    if errors:
        logger.error(f"API validation failed with {len(errors)} error(s)")
        raise ClassifiedError(
            f"API validation failed: {'; '.join(errors)}",
            ErrorType.API_ERROR,
            details={"response": _body(response), "errors": errors},
        )
    logger.debug(f"API validation passed ({checks} checks)")


def validate_status(response: httpx.Response, expected: int) -> None:
    validate_response(response, status=expected)


def validate_properties(response: httpx.Response, properties: Iterable[str]) -> None:
    validate_response(response, properties=properties)


def validate_schema(response: httpx.Response, schema: Mapping[str, Union[str, type]]) -> None:
    """
    Check that each schema key exists in the body with the given type.

    Types are JSON names ("string", "number", "boolean", "object", "array",
    "null", "integer") or Python types.
    """
    body = _body(response)
    fields = body if isinstance(body, dict) else {}
    errors: List[str] = []

    for key, expected in schema.items():
        if key not in fields:
            errors.append(f"Missing property: {key}")
        elif not _matches_type(fields[key], expected):
            expected_name = expected.__name__ if isinstance(expected, type) else expected
            errors.append(
                f"Expected {key} to be of type {expected_name}, "
                f"got {_type_name(fields[key])}"
            )

    _attach_validation_summary(len(schema), errors)
    if errors:
        raise ClassifiedError(
            f"API validation failed: {'; '.join(errors)}",
            ErrorType.API_ERROR,
            details={"response": body, "errors": errors},
        )


__all__ = [
    "collect_errors",
    "validate_response",
    "validate_status",
    "validate_properties",
    "validate_schema",
]
