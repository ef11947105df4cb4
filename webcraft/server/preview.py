"""
Preview Renderer
Wraps generated HTML fragments in a standalone document
"""

import html
from typing import Optional

DOWNLOAD_FILENAME = "index.html"
DOWNLOAD_MEDIA_TYPE = "text/html"

DEFAULT_SITE_TITLE = "My Website"

# Generated markup is untrusted: it only ever runs in an opaque origin
PREVIEW_CSP = "sandbox allow-scripts"

DOCUMENT_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1.0" />
  <title>{title}</title>
  <script src="https://cdn.tailwindcss.com"></script>
  <style>
    body {{
      font-family: 'Inter', sans-serif;
      line-height: 1.6;
      background-color: #f9fafb;
    }}
  </style>
</head>
<body>
{fragment}
</body>
</html>
"""


def render_document(fragment: str, site_name: Optional[str] = None) -> str:
    """
    Wrap a generated fragment verbatim in the fixed document shell

    Args:
        fragment: HTML returned by the model
        site_name: Used for the <title>; escaped

    Returns:
        The full document, identical for identical inputs
    """
    title = html.escape(site_name.strip()) if site_name and site_name.strip() else DEFAULT_SITE_TITLE
    return DOCUMENT_TEMPLATE.format(title=title, fragment=fragment)


def download_headers() -> dict:
    return {"Content-Disposition": f'attachment; filename="{DOWNLOAD_FILENAME}"'}


def preview_headers() -> dict:
    return {
        "Content-Security-Policy": PREVIEW_CSP,
        "X-Content-Type-Options": "nosniff",
        "Cache-Control": "no-store",
    }
