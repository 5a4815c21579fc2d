# Copyright (c) Rich Connexions Ltd. All rights reserved.
# Licensed under the MIT License. See LICENSE for details.
"""Identity-assurance extraction exceptions with stable error codes.

The extractor itself never raises for JSON-shaped input. These exceptions
cover the caller-side concerns around it: decoding raw request or dataset
text, and the internal recursion ceiling that makes extraction fail closed.
"""


class IdaError(Exception):
    """Base exception for identity-assurance extraction errors."""

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(message)


class InputDecodingError(IdaError):
    """Raw request or dataset text could not be decoded into a JSON object."""

    @classmethod
    def not_json(cls, what: str, reason: str) -> "InputDecodingError":
        return cls(code="INPUT_NOT_JSON", message=f"{what} is not valid JSON: {reason}")

    @classmethod
    def not_object(cls, what: str, actual: object) -> "InputDecodingError":
        return cls(
            code="INPUT_NOT_OBJECT",
            message=f"{what} must be a JSON object, got {type(actual).__name__}",
        )


class RecursionCeilingError(IdaError):
    """Request/dataset nesting exceeded the configured depth ceiling."""

    @classmethod
    def exceeded(cls, depth: int, pointer: str) -> "RecursionCeilingError":
        return cls(
            code="RECURSION_CEILING",
            message=f"Nesting depth {depth} exceeded at '{pointer or '/'}'",
        )


class CanonicalizationError(IdaError):
    """A tree handed to the digest holds a value that is not JSON."""

    @classmethod
    def unsupported(cls, pointer: str, value: object) -> "CanonicalizationError":
        return cls(
            code="NOT_CANONICALIZABLE",
            message=f"Value {value!r} at '{pointer or '/'}' has no canonical JSON form",
        )
