from __future__ import annotations

import base64
import html
from io import BytesIO

import segno


def qr_svg_data_uri(payload: str) -> str:
    qr = segno.make(payload)
    buffer = BytesIO()
    qr.save(buffer, kind="svg", xmldecl=False, scale=6, border=2)
    raw = buffer.getvalue()
    return f"data:image/svg+xml;base64,{base64.b64encode(raw).decode('ascii')}"


def render_setup_page(otpauth_uri: str, secret: str) -> str:
    image = html.escape(qr_svg_data_uri(otpauth_uri), quote=True)
    return f"""<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="robots" content="noindex">
<title>relay: authenticator setup</title>
</head>
<body>
<h1>Authenticator setup</h1>
<p>Scan this code with an authenticator app.</p>
<img src="{image}" alt="TOTP provisioning QR code">
<p>Or enter the secret manually:</p>
<pre>{html.escape(secret)}</pre>
</body>
</html>
"""
