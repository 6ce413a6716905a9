# agent/formatting.py
"""
Turn generated prose (suggested sources, reports) into display blocks.

The model tends to answer with loose markdown: bullets, numbered lists and
'#' headings. Each non-blank line becomes one block.
"""
import html
import re
from typing import List, Tuple

_BULLET = re.compile(r"^(\*|-)\s")
_NUMBERED = re.compile(r"^\d+\.\s")
_HEADING = re.compile(r"^(#+)\s")

Block = Tuple[str, str]


def format_ai_response(text: str) -> List[Block]:
    """Return (kind, text) pairs; kind is 'bullet', 'numbered', 'h<level+2>' or 'paragraph'."""
    blocks: List[Block] = []
    for line in (text or "").split("\n"):
        if not line.strip():
            continue
        if _BULLET.match(line):
            blocks.append(("bullet", line[2:]))
        elif _NUMBERED.match(line):
            blocks.append(("numbered", line[line.index(" ") + 1:]))
        elif _HEADING.match(line):
            level = len(_HEADING.match(line).group(1))
            blocks.append((f"h{min(level + 2, 6)}", line[level + 1:]))
        else:
            blocks.append(("paragraph", line))
    return blocks


def blocks_to_html(blocks: List[Block]) -> str:
    out = []
    for kind, text in blocks:
        t = html.escape(text)
        if kind == "bullet":
            out.append(f"<li style='margin-left:1rem;list-style:disc'>{t}</li>")
        elif kind == "numbered":
            out.append(f"<li style='margin-left:1rem;list-style:decimal'>{t}</li>")
        elif kind.startswith("h"):
            out.append(f"<{kind} style='font-weight:600;margin:1rem 0 .5rem'>{t}</{kind}>")
        else:
            out.append(f"<p>{t}</p>")
    return "".join(out)
