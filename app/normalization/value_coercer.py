"""
app/normalization/value_coercer.py

Type-directed conversion of raw cell values into canonical field values.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Mapping

from app.domain.scheme_import import (
    COUNT_FIELDS,
    FUNCTIONAL_STATUS_FIELD,
    IDENTIFIER_FIELD,
    SERIAL_FIELD,
    STATUS_FIELD,
    TEXT_FIELDS,
    CellValue,
)
from app.normalization.status_normalizer import (
    StatusNormalizer,
    functional_status_normalizer,
    scheme_status_normalizer,
)

_NON_NUMERIC = re.compile(r"[^0-9.\-]")


class ValueCoercer:
    """
    Converts mapped raw values into canonical types.

    Count fields never fail: anything unparseable becomes 0. The serial
    placeholder becomes None instead. Identifiers are kept as text even when
    they look numeric.
    """

    def __init__(
        self,
        *,
        status_normalizer: StatusNormalizer | None = None,
        functional_normalizer: StatusNormalizer | None = None,
    ) -> None:
        self._status = status_normalizer or scheme_status_normalizer
        self._functional = functional_normalizer or functional_status_normalizer

    def coerce(self, field_name: str, value: CellValue) -> Any:
        if field_name == IDENTIFIER_FIELD:
            return self.coerce_identifier(value)
        if field_name == SERIAL_FIELD:
            return self.coerce_serial(value)
        if field_name in COUNT_FIELDS:
            return self.coerce_count(value)
        if field_name == STATUS_FIELD:
            return self._status.normalize(value)
        if field_name == FUNCTIONAL_STATUS_FIELD:
            return self._functional.normalize(value)
        return self.coerce_text(value)

    def coerce_row(self, mapped: Mapping[str, CellValue]) -> dict[str, Any]:
        """
        Coerce every canonical field; fields absent from ``mapped`` get defaults.
        """

        coerced: dict[str, Any] = {
            IDENTIFIER_FIELD: self.coerce_identifier(mapped.get(IDENTIFIER_FIELD)),
            SERIAL_FIELD: self.coerce_serial(mapped.get(SERIAL_FIELD)),
            STATUS_FIELD: self._status.normalize(mapped.get(STATUS_FIELD)),
            FUNCTIONAL_STATUS_FIELD: self._functional.normalize(mapped.get(FUNCTIONAL_STATUS_FIELD)),
        }
        for field_name in TEXT_FIELDS:
            coerced[field_name] = self.coerce_text(mapped.get(field_name))
        for field_name in COUNT_FIELDS:
            coerced[field_name] = self.coerce_count(mapped.get(field_name))
        return coerced

    def coerce_identifier(self, value: CellValue) -> str | None:
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, float):
            if not math.isfinite(value):
                return None
            if value.is_integer():
                return str(int(value))
        text = str(value).strip()
        return text or None

    def coerce_count(self, value: CellValue) -> int:
        parsed = self._parse_number(value)
        if parsed is None:
            return 0
        return max(0, parsed)

    def coerce_serial(self, value: CellValue) -> int | None:
        parsed = self._parse_number(value)
        if parsed is None or parsed < 0:
            return None
        return parsed

    def coerce_text(self, value: CellValue) -> str | None:
        if value is None:
            return None
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        if isinstance(value, (datetime, date)):
            return value.isoformat()
        text = " ".join(str(value).split())
        return text or None

    @staticmethod
    def _parse_number(value: CellValue) -> int | None:
        if value is None or isinstance(value, (bool, datetime, date)):
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            if not math.isfinite(value):
                return None
            candidate = Decimal(str(value))
        else:
            cleaned = _NON_NUMERIC.sub("", str(value))
            if not cleaned or cleaned in {".", "-", "-."}:
                return None
            try:
                candidate = Decimal(cleaned)
            except InvalidOperation:
                return None
        if not candidate.is_finite():
            return None
        return int(candidate.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
