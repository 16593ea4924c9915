"""Codificación del campo `order.data.profile` de Codashop.

Es un JSON compacto en base64 con nombre, fecha de nacimiento y documento.
"""

from __future__ import annotations

import base64
import json


def encode_order_profile(name: str = "", dob: str = "", id_no: str = "") -> str:
    data = {"name": name, "dateofbirth": dob, "id_no": id_no}
    raw = json.dumps(data, separators=(",", ":"), ensure_ascii=False)
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")
