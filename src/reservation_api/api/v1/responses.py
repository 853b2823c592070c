from typing import Any

import simplejson
from fastapi.responses import JSONResponse


class DecimalJSONResponse(JSONResponse):
    """
    JSONResponse that writes Decimal values as exact JSON numbers, so a
    price quantized to 0.01 renders as 13.90 rather than 13.9.

    Content must be python-mode data (`model_dump()`, not `mode="json"`),
    otherwise pydantic has already turned the Decimals into strings.
    """

    def render(self, content: Any) -> bytes:
        return simplejson.dumps(
            content,
            use_decimal=True,
            ensure_ascii=False,
            allow_nan=False,
            separators=(",", ":"),
        ).encode("utf-8")
