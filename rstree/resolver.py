"""Second pass over a parsed tree: substitutions, references and contents."""

from __future__ import annotations

import copy
import os

from .messages import MessageKind
from .models import Node, NodeKind, new_leaf
from .refname import add_nodes, node_to_refname
from .state import Cursor


def resolve(p: Cursor, node: Node | None) -> Node | None:
    """Rewrite `node` and its descendants in place.

    - A substitution reference is replaced by a copy of its definition, found by exact
      name and then ignoring case and underscores. Without a definition, an
      environment variable of the same name is used; otherwise an
      ``unknown-substitution`` warning is reported and the node kept.
    - A reference with a known target becomes ``HYPERLINK[text, target]``.
      Unknown references are kept as they are.
    - A contents directive sets ``p.has_toc``.

    Returns:
        Node | None: The node that replaces `node`.
    """
    if node is None:
        return None
    if node.kind is NodeKind.SUBSTITUTION_REF:
        key = add_nodes(node)
        value = p.shared.find_substitution(key)
        if value is not None:
            return copy.deepcopy(value)
        env_value = os.environ.get(key, "")
        if env_value:
            return new_leaf(env_value)
        p.message(MessageKind.W_UNKNOWN_SUBSTITUTION, key)
        return node
    if node.kind is NodeKind.REF:
        target = p.shared.find_reference(node_to_refname(node))
        if target is None:
            return node
        node.kind = NodeKind.INNER
        return Node(NodeKind.HYPERLINK, children=[node, copy.deepcopy(target)])
    if node.kind is NodeKind.LEAF:
        return node
    if node.kind is NodeKind.CONTENTS:
        p.has_toc = True
        return node
    node.children = [resolve(p, child) for child in node.children]
    return node
