"""Export a DiagramScene as a standalone SVG document.

The document contains the untransformed world (pan/zoom are a view concern)
shifted so the bounding box starts at the margin.
"""

from __future__ import annotations

from pathlib import Path
from typing import List
from xml.sax.saxutils import escape, quoteattr

from gui.diagram.scene import DiagramScene

__all__ = ["scene_to_svg", "write_svg"]

_CONNECTOR_COLOR = "#52525b"
_CARD_FILL = "#18181b"
_HEADER_FILL = "#27272a"
_BORDER = "#3f3f46"
_TEXT = "#e4e4e7"
_MUTED = "#a1a1aa"
_TYPE_TEXT = "#71717a"
_PK_COLOR = "#f59e0b"


def _n(v: float) -> str:
    return str(int(v)) if float(v).is_integer() else f"{v:.2f}"


def scene_to_svg(scene: DiagramScene, *, margin: float = 40.0) -> str:
    box = scene.bounds(margin)
    out: List[str] = [
        '<svg xmlns="http://www.w3.org/2000/svg" '
        f'width="{_n(box.width)}" height="{_n(box.height)}" '
        f'viewBox="{_n(box.x)} {_n(box.y)} {_n(box.width)} {_n(box.height)}">',
        "<defs>",
        '<marker id="arrowhead" markerWidth="10" markerHeight="7" refX="9" refY="3.5" '
        'orient="auto">',
        f'<polygon points="0 0, 10 3.5, 0 7" fill="{_CONNECTOR_COLOR}"/>',
        "</marker>",
        "</defs>",
        '<g class="connectors">',
    ]
    for c in scene.connectors:
        out.append(
            f'<path data-relationship={quoteattr(c.relationship_id)} '
            f'data-route="{c.kind.value}" d="{c.to_svg()}" stroke="{_CONNECTOR_COLOR}" '
            'stroke-width="2" fill="none" marker-end="url(#arrowhead)"/>'
        )
    out.append("</g>")
    out.append('<g class="cards">')
    for card in scene.cards:
        r, h = card.rect, card.header
        out.append(f'<g data-table={quoteattr(card.table_id)}>')
        out.append(
            f'<rect x="{_n(r.x)}" y="{_n(r.y)}" width="{_n(r.width)}" height="{_n(r.height)}" '
            f'rx="8" fill="{_CARD_FILL}" stroke="{_BORDER}"/>'
        )
        out.append(
            f'<rect x="{_n(h.x)}" y="{_n(h.y)}" width="{_n(h.width)}" height="{_n(h.height)}" '
            f'rx="8" fill="{_HEADER_FILL}"/>'
        )
        out.append(
            f'<text x="{_n(h.x + 12)}" y="{_n(h.y + h.height / 2 + 5)}" fill="{_TEXT}" '
            f'font-family="sans-serif" font-size="14" font-weight="bold">'
            f"{escape(card.title)}</text>"
        )
        for row in card.rows:
            rr = row.rect
            baseline = _n(row.center_y + 4)
            name_x = rr.x + (28 if row.is_pk else 12)
            if row.is_pk:
                out.append(
                    f'<circle cx="{_n(rr.x + 16)}" cy="{_n(row.center_y)}" r="4" '
                    f'fill="{_PK_COLOR}"/>'
                )
            out.append(
                f'<text x="{_n(name_x)}" y="{baseline}" fill="{_TEXT if row.is_pk else _MUTED}" '
                f'font-family="sans-serif" font-size="12">{escape(row.name)}</text>'
            )
            out.append(
                f'<text x="{_n(rr.right - 12)}" y="{baseline}" text-anchor="end" '
                f'fill="{_TYPE_TEXT}" font-family="monospace" font-size="10">'
                f"{escape(row.type)}</text>"
            )
        out.append("</g>")
    out.append("</g>")
    out.append("</svg>")
    return "\n".join(out) + "\n"


def write_svg(scene: DiagramScene, path: str | Path) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(scene_to_svg(scene), encoding="utf-8")
    return target
