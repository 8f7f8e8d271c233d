"""Executive summary PDF generation.

Builds an HTML page from the extracted summary (markdown → HTML, laid out
with a Jinja2 template) and hands it to a DocumentRenderer. The default
renderer is WeasyPrint; tests and alternative deployments can pass any
object with a render(html) -> bytes method.
"""

import logging
from datetime import datetime
from typing import Optional, Protocol

import markdown
from jinja2 import BaseLoader, Environment

logger = logging.getLogger(__name__)

NO_SUMMARY_TEXT = "No summary available."


class DocumentRenderer(Protocol):
    def render(self, html: str) -> bytes: ...


class WeasyPrintRenderer:
    """Renders HTML to PDF bytes with WeasyPrint."""

    def render(self, html: str) -> bytes:
        try:
            from weasyprint import HTML
        except ImportError:
            raise ImportError(
                "weasyprint is required for PDF export. "
                "Install with: pip install weasyprint>=60.0"
            )
        return HTML(string=html).write_pdf()


_env = Environment(loader=BaseLoader(), autoescape=True)

EXECUTIVE_SUMMARY_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>Executive Summary: {{ topic }}</title>
    <style>
        @page {
            size: A4;
            margin: 2cm 2.5cm;
            @bottom-center {
                content: "Enterprise Architecture Analysis";
                font-family: 'Inter', sans-serif;
                font-size: 8pt;
                color: #94a3b8;
            }
        }
        body {
            font-family: 'Inter', 'Helvetica', sans-serif;
            font-size: 11pt;
            line-height: 1.6;
            color: #1e293b;
        }
        h1 {
            font-size: 20pt;
            color: #667eea;
            margin-bottom: 0.3em;
        }
        .topic {
            font-size: 16pt;
            color: #000000;
            margin-bottom: 0.2em;
        }
        .meta {
            font-size: 10pt;
            color: #808080;
            margin-bottom: 2em;
        }
        h2 {
            font-size: 14pt;
            color: #0f172a;
            border-bottom: 2px solid #e2e8f0;
            padding-bottom: 0.3em;
        }
        .summary p {
            text-align: justify;
            margin-bottom: 0.6em;
        }
        .summary.empty {
            color: #64748b;
            font-style: italic;
        }
    </style>
</head>
<body>
    <h1>Enterprise Architecture Analysis</h1>
    <div class="topic">Technology: {{ topic }}</div>
    <div class="meta">
        Prepared for {{ organization }} &middot; Generated {{ generated }}
    </div>
    <h2>Executive Summary</h2>
    <div class="summary{% if is_empty %} empty{% endif %}">
        {{ summary_html | safe }}
    </div>
</body>
</html>"""


def build_executive_summary_html(
    topic: str,
    summary_text: str,
    organization: str,
    generated_at: Optional[datetime] = None,
) -> str:
    """Build the HTML for the executive summary document.

    An empty summary renders the NO_SUMMARY_TEXT placeholder.
    """
    is_empty = not summary_text.strip()
    body = NO_SUMMARY_TEXT if is_empty else summary_text
    # Raw HTML in model output is shown as text, never interpreted
    summary_html = markdown.markdown(
        body.replace("<", "&lt;").replace(">", "&gt;"),
        extensions=["tables"],
    )
    generated = (generated_at or datetime.now()).strftime("%B %d, %Y")

    template = _env.from_string(EXECUTIVE_SUMMARY_TEMPLATE)
    return template.render(
        topic=topic,
        organization=organization,
        generated=generated,
        summary_html=summary_html,
        is_empty=is_empty,
    )


def render_executive_summary_pdf(
    topic: str,
    summary_text: str,
    organization: str,
    renderer: Optional[DocumentRenderer] = None,
    generated_at: Optional[datetime] = None,
) -> bytes:
    """Render the executive summary PDF. Returns PDF bytes."""
    html = build_executive_summary_html(topic, summary_text, organization, generated_at)
    pdf_bytes = (renderer or WeasyPrintRenderer()).render(html)
    logger.info(
        f"Rendered executive summary for '{topic}': {len(pdf_bytes):,} bytes"
        + (" (no summary available)" if not summary_text.strip() else "")
    )
    return pdf_bytes
