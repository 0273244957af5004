import io
import re

import qrcode


def render_qr_png(token, box_size=10, border=4):
    """Encode a scan token as a PNG image and return the raw bytes."""
    qr = qrcode.QRCode(
        version=None,  # fit to data
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(token)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


def qr_download_name(student):
    name = re.sub(r"\s+", "_", student.name)
    return f"QR_{student.nis}_{name}.png"
