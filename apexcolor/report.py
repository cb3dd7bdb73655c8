"""HTML swatch report for extracted colors."""
from html import escape
from pathlib import Path
from typing import Dict, List, Sequence, Tuple, Union

from apexcolor.types import ColorSample

# Image name -> [(configuration label, colors)]
ReportData = Dict[str, List[Tuple[str, Sequence[ColorSample]]]]

SWATCH_STYLE = "background-color: #{hex};width:200px;height:50px;text-align:center;"


def render_color_row(colors: Sequence[ColorSample]) -> str:
    """One table row with a swatch cell per color, labelled '#RRGGBB count'."""
    cells = [
        f'<td style="{SWATCH_STYLE.format(hex=color.hex)}">#{color.hex} {color.count}</td>'
        for color in colors
    ]
    return "<table><tr>" + "".join(cells) + "</tr></table>"


def render_report(data: ReportData) -> str:
    """
    Render a full HTML page.

    Each image gets a row with its thumbnail and, for every configuration
    it was processed with, a heading and a swatch row.
    """
    parts = [
        "<html><body>",
        "<h1>Colors listed in order of dominance: hex color followed by number of entries</h1>",
        '<table border="1">',
    ]
    for image_name, runs in data.items():
        name = escape(image_name)
        parts.append(f'<tr><td><img src="{name}" width="200" border="1"></td><td>')
        for label, colors in runs:
            parts.append(f"<h3>{escape(label)}</h3>")
            parts.append(render_color_row(colors))
        parts.append("</td></tr>")
    parts.append("</table></body></html>")
    return "\n".join(parts)


def save_report(html: str, output_path: Union[str, Path]) -> Path:
    """Write the report and return its path."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(html, encoding="utf-8")
    return output_path
