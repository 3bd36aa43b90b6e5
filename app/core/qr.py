# app/core/qr.py
import base64
import io

import qrcode
from qrcode.constants import ERROR_CORRECT_H


def make_qr_data_url(data: str) -> str:
    """PNG QR code for ``data`` as a data URL the frontend can show directly."""
    qr = qrcode.QRCode(error_correction=ERROR_CORRECT_H)
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image()

    buf = io.BytesIO()
    img.save(buf)
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")
