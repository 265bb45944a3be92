"""Location of ``{{#tag ...}} ... {{/tag}}`` blocks in template text.

Blocks are paired by depth rather than by the nearest closing tag, so an
``{{#if}}`` nested inside another ``{{#if}}`` (or inside an ``{{#each}}``)
closes where it should. Only top-level blocks are reported; their bodies
are left untouched for the recursive render to handle.
"""

import re
from dataclasses import dataclass, field
from typing import Collection, List, Tuple

# Opening tag ({{#if cond}}, {{#each path}}), closing tag ({{/if}}) or {{else}}
TAG_PATTERN = re.compile(
    r"\{\{\s*(?:"
    r"#(?P<open>if|each)\s+(?P<argument>.*?)"
    r"|/(?P<close>if|each)"
    r"|(?P<else>else)"
    r")\s*\}\}",
    re.DOTALL,
)

BLOCK_KINDS = ("if", "each")


@dataclass
class Block:
    """A top-level block found in template text.

    Attributes:
        kind: Block keyword ("if" or "each")
        argument: Text after the keyword in the opening tag (condition or path)
        start: Offset of the opening tag
        end: Offset just past the closing tag
        body_start: Offset just past the opening tag
        body_end: Offset of the closing tag
        else_span: (start, end) of the block's own {{else}} tag, if any
    """
    kind: str
    argument: str
    start: int
    end: int
    body_start: int
    body_end: int
    else_span: Tuple[int, int] | None = None

    def body(self, text: str) -> str:
        """Return the full text between the opening and closing tags."""
        return text[self.body_start:self.body_end]

    def branches(self, text: str) -> Tuple[str, str]:
        """Split the body at this block's {{else}} tag.

        Returns:
            (first branch, second branch); the second is "" without an else
        """
        if self.else_span is None:
            return self.body(text), ""
        else_start, else_end = self.else_span
        return text[self.body_start:else_start], text[else_end:self.body_end]


@dataclass
class _OpenBlock:
    kind: str
    argument: str
    start: int
    body_start: int
    else_span: Tuple[int, int] | None = None
    children: List[Block] = field(default_factory=list)


def find_blocks(text: str, kinds: Collection[str] = BLOCK_KINDS) -> List[Block]:
    """Find the top-level blocks of the given kinds, in document order.

    Nesting depth is tracked across all block kinds, so an ``if`` inside an
    ``each`` body is not top-level and is not reported. A closing tag that
    does not match the innermost open block is ignored. When an opening tag
    is never closed, the blocks completed inside it are promoted to the
    level where the unclosed tag stands.

    Args:
        text: Template text to scan
        kinds: Block kinds to report

    Returns:
        Blocks sorted by start offset

    Example:
        >>> text = "{{#if a}}{{#if b}}x{{/if}}{{else}}y{{/if}}"
        >>> [block] = find_blocks(text, {"if"})
        >>> block.branches(text)
        ('{{#if b}}x{{/if}}', 'y')
    """
    stack: List[_OpenBlock] = []
    top_level: List[Block] = []

    for match in TAG_PATTERN.finditer(text):
        if match.group("open"):
            stack.append(_OpenBlock(
                kind=match.group("open"),
                argument=match.group("argument").strip(),
                start=match.start(),
                body_start=match.end(),
            ))
        elif match.group("close"):
            if not stack or stack[-1].kind != match.group("close"):
                continue
            opened = stack.pop()
            block = Block(
                kind=opened.kind,
                argument=opened.argument,
                start=opened.start,
                end=match.end(),
                body_start=opened.body_start,
                body_end=match.start(),
                else_span=opened.else_span,
            )
            if stack:
                stack[-1].children.append(block)
            else:
                top_level.append(block)
        elif stack:
            # {{else}} belongs to the innermost open if block only
            current = stack[-1]
            if current.kind == "if" and current.else_span is None:
                current.else_span = (match.start(), match.end())

    # Unclosed openers: their completed children surface one level up
    while stack:
        orphaned = stack.pop()
        if stack:
            stack[-1].children.extend(orphaned.children)
        else:
            top_level.extend(orphaned.children)

    return sorted(
        (block for block in top_level if block.kind in kinds),
        key=lambda block: block.start,
    )


def replace_blocks(text: str, blocks: List[Block], replacements: List[str]) -> str:
    """Splice rendered replacements into text in place of their blocks.

    Args:
        text: Original text the blocks were found in
        blocks: Non-overlapping blocks sorted by start offset
        replacements: One replacement string per block

    Returns:
        The rewritten text
    """
    parts = []
    position = 0
    for block, replacement in zip(blocks, replacements):
        parts.append(text[position:block.start])
        parts.append(replacement)
        position = block.end
    parts.append(text[position:])
    return "".join(parts)
