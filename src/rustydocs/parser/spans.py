"""Line-accurate source slicing for nested declarations."""

from __future__ import annotations

# Nodes that belong to the item following them
_ATTACHED_NODE_TYPES = {"attribute_item"}
_COMMENT_NODE_TYPES = {"line_comment", "block_comment"}


def source_lines(code: str) -> list[str]:
    """Split on newlines only, matching tree-sitter's row numbering."""
    return [line[:-1] if line.endswith("\r") else line for line in code.split("\n")]


def slice_lines(
    code: str,
    start_line: int,
    end_line: int,
    parent_start_line: int | None = None,
) -> str:
    """Return the verbatim lines ``start_line..end_line`` (1-based, inclusive).

    ``code`` is either a whole file (``parent_start_line`` is None and the
    lines are absolute) or the text of an enclosing declaration that begins
    at ``parent_start_line`` of the file.
    """
    if parent_start_line is not None:
        start = start_line - parent_start_line + 1
        end = end_line - parent_start_line + 1
    else:
        start = start_line
        end = end_line

    lines = source_lines(code)
    first = max(start - 1, 0)
    if start == end:
        return lines[first]
    return "\n".join(lines[first:end])


def is_outer_doc_comment(text: str) -> bool:
    """Whether a comment is an outer doc comment (``///`` or ``/** */``)."""
    if text.startswith("///"):
        return not text.startswith("////")
    if text.startswith("/**"):
        return not text.startswith("/***") and not text.startswith("/**/")
    return False


def node_span(node) -> tuple[int, int]:
    """1-based (start, end) lines of an item node.

    The start is moved up over the outer attributes and doc comments that
    precede the item, since they are part of it. Plain comments in between
    are stepped over without moving the start.
    """
    start = node.start_point[0] + 1
    end = node.end_point[0] + 1

    sibling = node.prev_named_sibling
    while sibling is not None:
        if sibling.type in _ATTACHED_NODE_TYPES:
            start = sibling.start_point[0] + 1
        elif sibling.type in _COMMENT_NODE_TYPES:
            text = sibling.text.decode("utf-8", errors="replace")
            if is_outer_doc_comment(text):
                start = sibling.start_point[0] + 1
        else:
            break
        sibling = sibling.prev_named_sibling

    return start, end
