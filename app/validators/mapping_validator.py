"""
app/validators/mapping_validator.py

Validation for resolved sheet column mappings.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Mapping, Sequence

IDENTIFIER_CAPABLE_FIELDS: tuple[str, ...] = ("scheme_id", "scheme_name")


@dataclass(frozen=True)
class MappingErrorDetail:
    """
    Structured mapping error detail.
    """

    code: str
    message: str
    canonical_field: str | None = None
    source_column: str | None = None
    context: dict[str, Any] | None = None


class SchemaMappingError(ValueError):
    """
    Raised when a sheet's columns cannot be mapped safely.
    """

    def __init__(self, *, message: str, errors: Sequence[MappingErrorDetail]) -> None:
        super().__init__(message)
        self.message = message
        self.errors = tuple(errors)

    @property
    def codes(self) -> tuple[str, ...]:
        return tuple(error.code for error in self.errors)

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "errors": [asdict(error) for error in self.errors]}


class MappingValidator:
    """
    Validates a resolved field -> column index mapping.
    """

    def __init__(
        self,
        *,
        canonical_fields: Sequence[str],
        identifier_fields: Sequence[str] = IDENTIFIER_CAPABLE_FIELDS,
    ) -> None:
        self._canonical_set = set(canonical_fields)
        self._identifier_fields = tuple(identifier_fields)

    def validate(
        self,
        *,
        mapping: Mapping[str, int],
        source_headers: Sequence[str],
    ) -> None:
        """
        Raise ``SchemaMappingError`` when the mapping cannot identify a scheme.
        """

        errors: list[MappingErrorDetail] = []

        for canonical_field, column in mapping.items():
            if canonical_field not in self._canonical_set:
                errors.append(
                    MappingErrorDetail(
                        code="invalid_canonical_field",
                        message="Unknown canonical field in mapping.",
                        canonical_field=canonical_field,
                        source_column=_header_at(source_headers, column),
                    )
                )
            elif not 0 <= column < len(source_headers):
                errors.append(
                    MappingErrorDetail(
                        code="unknown_source_column",
                        message="Mapped column index is outside the header row.",
                        canonical_field=canonical_field,
                        context={"column_index": column},
                    )
                )

        if not any(field_name in mapping for field_name in self._identifier_fields):
            errors.append(
                MappingErrorDetail(
                    code="identifier_unmapped",
                    message="No column maps to a scheme identifier or scheme name.",
                    context={"source_headers": list(source_headers)},
                )
            )

        if errors:
            codes = ", ".join(sorted({error.code for error in errors}))
            raise SchemaMappingError(
                message=f"Sheet column mapping validation failed: {codes}.",
                errors=errors,
            )


def _header_at(headers: Sequence[str], column: int) -> str | None:
    if 0 <= column < len(headers):
        return headers[column]
    return None
