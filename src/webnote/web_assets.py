from __future__ import annotations

from urllib.parse import quote


def build_favicon_svg(
    label: str = "wn",
    *,
    background: str = "#1c1917",
    text_color: str = "#fef3c7",
    fold_color: str | None = "#fbbf24",
) -> str:
    """Return a square note-page badge with a folded corner."""
    normalized = (label or "wn").strip()[:2] or "wn"
    font_size = "24" if len(normalized) > 1 else "30"
    fold_markup = (
        f'<path d="M46 4 L60 18 L46 18 Z" fill="{fold_color}" />'
        if fold_color
        else ""
    )
    return f"""<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 64 64" role="img" aria-label="{normalized} icon">
  <path d="M4 4 H46 L60 18 V60 H4 Z" fill="{background}" />
  {fold_markup}
  <text x="30" y="44" text-anchor="middle" font-family="ui-monospace, 'SF Mono', Menlo, Consolas, monospace"
        font-size="{font_size}" font-weight="700" fill="{text_color}">{normalized}</text>
</svg>"""


def favicon_data_url(label: str = "wn", **colors: str | None) -> str:
    """Build the favicon SVG and wrap it in a data URL for inline use."""
    return "data:image/svg+xml," + quote(build_favicon_svg(label, **colors))


WEBNOTE_FAVICON_SVG = build_favicon_svg()
WEBNOTE_FAVICON_URL = favicon_data_url()


__all__ = [
    "build_favicon_svg",
    "favicon_data_url",
    "WEBNOTE_FAVICON_SVG",
    "WEBNOTE_FAVICON_URL",
]
