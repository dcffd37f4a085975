"""TreeNode rendering utilities."""

from typing import List, Sequence

from ..core.models import TreeNode


BRANCH = "├── "
LAST_BRANCH = "└── "
PIPE = "│   "
SPACE = "    "


class TreeRenderer:
    """Renders TreeNode roots as an ASCII tree."""

    @staticmethod
    def render(nodes: Sequence[TreeNode]) -> str:
        """
        Render roots and their descendants as indented text.

        Each root is printed on its own line, descendants below it with
        branch connectors. Directories end with '/'. Children are rendered in
        the order the walker produced them.

        Args:
            nodes: Root nodes to render.

        Returns:
            Tree text without a trailing newline.
        """
        lines: List[str] = []
        for root in nodes:
            lines.append(TreeRenderer._label(root))
            TreeRenderer._render_children(root, "", lines)
        return "\n".join(lines)

    @staticmethod
    def _render_children(node: TreeNode, prefix: str, lines: List[str]) -> None:
        count = len(node.children)
        for i, child in enumerate(node.children):
            is_last = (i == count - 1)
            connector = LAST_BRANCH if is_last else BRANCH
            lines.append(f"{prefix}{connector}{TreeRenderer._label(child)}")
            if child.is_directory:
                extension = SPACE if is_last else PIPE
                TreeRenderer._render_children(child, prefix + extension, lines)

    @staticmethod
    def _label(node: TreeNode) -> str:
        if node.is_directory and not node.display_name.endswith('/'):
            return node.display_name + "/"
        return node.display_name
