"""
Compiler for render nodes to HTML

Transforms assembled render nodes into an HTML fragment or a standalone
HTML page.
"""

import html
import re
from typing import Any, Dict, List, Optional
from pathlib import Path

from ..config import appsettings, AppSettings
from ..models.document import DocNode
from ..models.render import (
    RenderNode,
    TagChip,
    MarkupBlock,
    RawBlock,
    SpoilerBlock,
    LineBreak,
    Separator,
)
from .emoji import EmojiResolver
from .overrides import OverrideRegistry, attr_escape
from .log import LOG

# Color overrides end up inside a style attribute: keep them to color syntax
COLOR_PATTERN = re.compile(r'^[#\w(),.%-]+$')

SPOILER_ONCLICK = "this.classList.toggle('revealed')"

DOCUMENT_STYLE = """    <style>
      .post-content { line-height: 1.6; }
      .tag-chip { display: inline-block; font-size: 0.75rem; padding: 0.25rem 0.5rem;
                  margin: 0 0.25rem; border: 1px solid #e5e7eb; border-radius: 9999px;
                  background: #f3f4f6; color: #1f2937; cursor: pointer; }
      .tag-chip-nested { background: #eff6ff; color: #1d4ed8; border-color: #bfdbfe; }
      .tag-chip-active { border-color: currentColor; font-weight: 600; }
      .tag-parent { color: #6b7280; }
      .tag-child { font-weight: 500; }
      .spoiler { cursor: pointer; border-radius: 0.25rem; transition: all 0.2s; }
      .spoiler-blur { filter: blur(4px); }
      .spoiler-box { background: var(--spoiler-color, #1f2937); color: transparent; }
      .spoiler.revealed { filter: none; background: transparent; color: inherit; }
    </style>"""


class Compiler:
    """
    Compiles render nodes to HTML

    Responsibilities:
    - Transform document trees to HTML through the override registry
    - Render tag chips, spoilers, raw blocks and explicit breaks
    - Generate the standalone output page
    """

    def __init__(
        self,
        nodes: List[RenderNode],
        output_dir: str = ".",
        output_file: str = "index.html",
        resolver: Optional[EmojiResolver] = None,
        settings: Optional[AppSettings] = None,
        title: str = "Post",
    ) -> None:
        """
        Initialize compiler

        Args:
            nodes: Assembled render nodes
            output_dir: Directory for compiled output
            output_file: Name of the page written by compile()
            resolver: Emoji resolver used for image fallback locators
            settings: Configuration (defaults to appsettings)
            title: Page title for the standalone document
        """
        self.nodes = nodes
        self.output_dir = Path(output_dir)
        self.output_file = output_file
        self.settings = settings or appsettings
        self.resolver = resolver or EmojiResolver.from_settings(self.settings)
        self.overrides = OverrideRegistry()
        self.title = title

    def compile(self) -> Dict[str, Any]:
        """
        Compile render nodes to a standalone HTML page

        Returns:
            dict with compilation results and statistics
        """
        LOG("Starting compilation...", level=2)

        self.output_dir.mkdir(parents=True, exist_ok=True)

        full_html = self.htmlDocument_build(self.content_compile())

        output_file = self.output_dir / self.output_file
        output_file.write_text(full_html, encoding='utf-8')
        LOG(f"Wrote {output_file}", level=2)

        return {
            'status': True,
            'output_file': str(output_file),
            'node_count': len(self.nodes),
            'tag_count': sum(1 for node in self.nodes if isinstance(node, TagChip)),
        }

    def content_compile(self) -> str:
        """
        Compile render nodes to an HTML fragment

        Returns:
            '<div class="post-content">...</div>'
        """
        body = ''.join(self.node_compile(node) for node in self.nodes)
        return f'<div class="post-content">{body}</div>'

    def node_compile(self, node: RenderNode) -> str:
        """Compile a single render node to HTML"""
        if isinstance(node, TagChip):
            return self.tagChip_compile(node)
        if isinstance(node, MarkupBlock):
            return self.document_compile(node.document)
        if isinstance(node, RawBlock):
            return f'<div class="raw-markup">{node.value}</div>'
        if isinstance(node, SpoilerBlock):
            return self.spoiler_compile(node)
        if isinstance(node, LineBreak):
            return '<br>'
        if isinstance(node, Separator):
            return html.escape(node.text)
        raise TypeError(f"Unknown render node: {node!r}")

    def document_compile(self, node: DocNode) -> str:
        """
        Compile a document tree to HTML

        Uses inside-out compilation:
        1. Recursively compile all children
        2. Hand the joined child HTML to the node type's override handler

        Args:
            node: Document (sub)tree

        Returns:
            Compiled HTML for this node
        """
        content = ''.join(self.document_compile(child) for child in node.children)

        handler = self.overrides.get(node.type)
        if handler:
            return handler(node, content, self)

        LOG(f"Warning: No override for node type '{node.type}'", level=2)
        return f'<div class="node-{attr_escape(node.type)}">{content}</div>'

    def tagChip_compile(self, chip: TagChip) -> str:
        """
        Compile a tag chip

        Two-level tags show the parent dimmed and the child emphasized.
        data-tag carries the click payload for the presentation layer.
        """
        css_classes = "tag-chip"
        if chip.is_nested:
            css_classes += " tag-chip-nested"
        if chip.active:
            css_classes += " tag-chip-active"

        if chip.is_nested:
            label = (
                f'<span class="tag-parent">#{html.escape(chip.parent)}/</span>'
                f'<span class="tag-child">{html.escape(chip.child or "")}</span>'
            )
        else:
            label = html.escape(chip.content)

        return (
            f'<span class="{css_classes}" data-tag="{attr_escape(chip.tag_name)}"'
            f' title="{attr_escape(chip.content)}">{label}</span>'
        )

    def spoiler_compile(self, spoiler: SpoilerBlock) -> str:
        """Compile a spoiler; the color override is dropped unless it looks like a color"""
        style = spoiler.style_type.value
        style_attr = ''
        if spoiler.color and COLOR_PATTERN.match(spoiler.color):
            style_attr = f' style="--spoiler-color: {attr_escape(spoiler.color)}"'
        elif spoiler.color:
            LOG(f"Ignoring spoiler color '{spoiler.color}'", level=2)

        return (
            f'<span class="spoiler spoiler-{style}" data-style="{style}"{style_attr}'
            f' onclick="{SPOILER_ONCLICK}">{html.escape(spoiler.text)}</span>'
        )

    def htmlDocument_build(self, content: str) -> str:
        """
        Build complete HTML document

        Args:
            content: Compiled post fragment

        Returns:
            Complete HTML document
        """
        return f"""<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <title>{html.escape(self.title)}</title>
{DOCUMENT_STYLE}
  </head>
<body>
  {content}
</body>
</html>
"""
