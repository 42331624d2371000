"""
Patricia trie (radix tree) — space-optimized prefix tree over strings.

Every node stores a label fragment instead of a single character, and the
tree is kept compact after every mutation:

  - Every non-root branch node has at least two children.
  - Siblings never share a leading character.
  - Concatenating labels from the root down to a node spells the string
    that node represents; terminal nodes mark strings that were added.

Techniques used:
  - Prefix-consuming walk: one shared loop drives ``add``, ``remove`` and
    ``contains``; where it stops decides which mutation case applies.
  - Label splitting on insert: a divergence inside a label introduces a new
    branch node carrying the shared prefix.
  - Upward compaction on remove: single-child branch ancestors are fused
    into their only child until the invariant holds again.
  - Iterative traversal: enumeration and rendering use an explicit stack,
    so the call stack stays constant regardless of depth.

Complexity (n = key length, k = children per node, m = matches):
  add / remove / contains   — O(n * k)
  keys_with_prefix          — O(n * k + m)
  size                      — O(1)

The structure is not safe for concurrent use; callers sharing one trie
between threads must serialize every operation themselves.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Iterator

logger = logging.getLogger(__name__)


class TrieCorruptionError(RuntimeError):
    """An internal structural invariant of the trie has been broken."""


class Color(enum.IntEnum):
    """Node color. BRANCH sorts before TERMINAL."""

    BRANCH = 0
    TERMINAL = 1


@dataclass(eq=False)
class Node:
    """A labelled node of the Patricia trie.

    Nodes compare and hash by identity; use :func:`node_sort_key` when a
    deterministic ordering is needed.
    """

    label: str = ""
    color: Color = Color.BRANCH
    children: list[Node] = field(default_factory=list)
    parent: Node | None = None

    @property
    def is_terminal(self) -> bool:
        return self.color is Color.TERMINAL

    @property
    def is_root(self) -> bool:
        return self.parent is None

    def matches_at(self, char: str, index: int) -> bool:
        """True iff ``label[index]`` exists and equals *char*."""
        return index < len(self.label) and self.label[index] == char

    def child_starting_with(self, char: str) -> Node | None:
        """Linear scan for the child whose label begins with *char*."""
        for child in self.children:
            if child.label[0] == char:
                return child
        return None

    def add_child(self, node: Node) -> None:
        node.parent = self
        self.children.append(node)

    def remove_child(self, node: Node) -> None:
        # Identity removal; remaining children keep their relative order.
        for i, child in enumerate(self.children):
            if child is node:
                del self.children[i]
                node.parent = None
                return
        raise TrieCorruptionError(
            f"node {node.label!r} is not a child of {self.label!r}"
        )

    def replace_child(self, old: Node, new: Node) -> None:
        """Put *new* in the slot *old* occupies and re-parent it here."""
        for i, child in enumerate(self.children):
            if child is old:
                self.children[i] = new
                new.parent = self
                old.parent = None
                return
        raise TrieCorruptionError(
            f"node {old.label!r} is not a child of {self.label!r}"
        )

    def only_child(self) -> Node:
        if len(self.children) != 1:
            raise TrieCorruptionError(
                f"node {self.label!r} has {len(self.children)} children, expected 1"
            )
        return self.children[0]

    def __repr__(self) -> str:
        return (
            f"Node(label={self.label!r}, color={self.color.name}, "
            f"children={len(self.children)})"
        )


def node_sort_key(node: Node) -> tuple[str, int, int]:
    """Ordering for diagnostics: label, then BRANCH < TERMINAL, then arity."""
    return (node.label, int(node.color), len(node.children))


def _check_key(key: object) -> None:
    if not isinstance(key, str):
        raise TypeError(f"trie keys must be str, not {type(key).__name__}")


class PatriciaTrie:
    """A compressed prefix tree storing a set of strings.

    >>> t = PatriciaTrie()
    >>> t.add("car"), t.add("cat"), t.add("dog")
    (True, True, True)
    >>> t.add("car")
    False
    >>> t.size()
    3
    >>> "ca" in t
    False
    >>> t.remove("cat")
    True
    >>> [child.label for child in t.root.children]
    ['car', 'dog']

    The empty string is a legal key and is represented by the root itself.
    """

    def __init__(self) -> None:
        self.root = Node()
        self._size = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def add(self, key: str) -> bool:
        """Insert *key*. Returns ``False`` if it was already present."""
        return self.add_node(key) is not None

    def add_node(self, key: str) -> Node | None:
        """Insert *key* and return the node now marking it as terminal.

        Returns ``None`` (and changes nothing) if *key* is already present.
        """
        _check_key(key)
        node, index, consumed = self._walk(key)

        if index < len(node.label):
            added = self._split(node, index, key[consumed:])
        elif consumed == len(key):
            if node.is_terminal:
                return None
            node.color = Color.TERMINAL
            logger.debug("Promoted %r to terminal", node.label)
            added = node
        else:
            added = Node(label=key[consumed:], color=Color.TERMINAL)
            node.add_child(added)
            logger.debug("Extended %r with %r", node.label, added.label)

        self._size += 1
        return added

    def remove(self, key: str) -> bool:
        """Remove *key*. Returns ``True`` if it existed."""
        node = self.lookup(key)
        if node is None or not node.is_terminal:
            return False

        node.color = Color.BRANCH
        self._size -= 1
        if node.is_root:
            return True

        parent = node.parent
        if not node.children:
            parent.remove_child(node)
            logger.debug("Pruned %r", node.label)
        elif len(node.children) == 1:
            self._fuse(node)

        # Walk up the tree and compact single-child branches.
        current = parent
        while (
            not current.is_root
            and not current.is_terminal
            and len(current.children) == 1
        ):
            grandparent = current.parent
            self._fuse(current)
            current = grandparent
        return True

    def contains(self, key: str) -> bool:
        """Return ``True`` if *key* was added and not removed since."""
        node = self.lookup(key)
        return node is not None and node.is_terminal

    def lookup(self, key: str) -> Node | None:
        """Return the node whose path spells exactly *key*, of any color."""
        _check_key(key)
        node, index, consumed = self._walk(key)
        if consumed == len(key) and index == len(node.label):
            return node
        return None

    def size(self) -> int:
        return self._size

    def starts_with(self, prefix: str) -> bool:
        """Return ``True`` if any stored key begins with *prefix*."""
        _check_key(prefix)
        node, _, consumed = self._walk(prefix)
        if consumed < len(prefix):
            return False
        if node.is_root:
            return self._size > 0
        # Every non-root subtree holds at least one terminal node.
        return True

    def keys_with_prefix(self, prefix: str) -> Iterator[str]:
        """Yield all stored keys beginning with *prefix*, in sorted order."""
        _check_key(prefix)
        node, index, consumed = self._walk(prefix)
        if consumed < len(prefix):
            return
        # The walk may stop inside a label; complete it to a node boundary.
        stack: list[tuple[Node, str]] = [(node, prefix + node.label[index:])]
        while stack:
            current, acc = stack.pop()
            if current.is_terminal:
                yield acc
            for child in sorted(current.children, key=node_sort_key, reverse=True):
                stack.append((child, acc + child.label))

    def keys(self) -> Iterator[str]:
        return self.keys_with_prefix("")

    def render(self) -> str:
        """Human-readable indented tree, one node per line.

        Each line shows the label, the color tag and the full string the
        node represents. Children are listed in sorted order.
        """
        lines: list[str] = []
        stack: list[tuple[Node, str, str, bool]] = [(self.root, "", "", True)]
        while stack:
            node, indent, acc, is_tail = stack.pop()
            marker = "└── " if is_tail else "├── "
            tag = "[terminal]" if node.is_terminal else "[branch]"
            if node.is_root:
                lines.append(f"{indent}{marker}{tag}")
            else:
                lines.append(f"{indent}{marker}({node.label}) {tag} {acc}")
            child_indent = indent + ("    " if is_tail else "│   ")
            ordered = sorted(node.children, key=node_sort_key)
            for i in range(len(ordered) - 1, -1, -1):
                child = ordered[i]
                stack.append(
                    (child, child_indent, acc + child.label, i == len(ordered) - 1)
                )
        return "\n".join(lines) + "\n"

    def check_invariants(self) -> None:
        """Verify the structural invariants, raising on the first breach."""
        root = self.root
        if root.parent is not None:
            raise TrieCorruptionError("root has a parent")
        if root.label:
            raise TrieCorruptionError(f"root label is {root.label!r}, expected ''")

        seen: set[int] = set()
        terminals = 0
        stack: list[Node] = [root]
        while stack:
            node = stack.pop()
            if id(node) in seen:
                raise TrieCorruptionError(f"node {node.label!r} reachable twice")
            seen.add(id(node))
            if node.is_terminal:
                terminals += 1
            if node is not root and not node.label:
                raise TrieCorruptionError("non-root node with empty label")
            if node is not root and not node.is_terminal and len(node.children) < 2:
                raise TrieCorruptionError(
                    f"branch {node.label!r} has {len(node.children)} children"
                )
            leading: set[str] = set()
            for child in node.children:
                if child.parent is not node:
                    raise TrieCorruptionError(
                        f"child {child.label!r} does not point back to {node.label!r}"
                    )
                if child.label[:1] in leading:
                    raise TrieCorruptionError(
                        f"siblings under {node.label!r} share leading "
                        f"character {child.label[:1]!r}"
                    )
                leading.add(child.label[:1])
                stack.append(child)

        if terminals != self._size:
            raise TrieCorruptionError(
                f"size is {self._size} but {terminals} terminal nodes are reachable"
            )

    def __len__(self) -> int:
        return self._size

    def __contains__(self, key: str) -> bool:
        return self.contains(key)

    def __iter__(self) -> Iterator[str]:
        return self.keys()

    def __str__(self) -> str:
        return self.render()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _walk(self, key: str) -> tuple[Node, int, int]:
        """Consume *key* from the root as far as the tree allows.

        Returns ``(node, index, consumed)``: the node the walk stopped in,
        how many characters of its label were matched, and how many
        characters of *key* were consumed.
        """
        node = self.root
        index = 0
        consumed = 0
        while consumed < len(key):
            char = key[consumed]
            if node.matches_at(char, index):
                index += 1
                consumed += 1
                continue
            if index < len(node.label):
                # Mismatch inside the label.
                break
            child = node.child_starting_with(char)
            if child is None:
                break
            node = child
            index = 1
            consumed += 1
        return node, index, consumed

    def _split(self, node: Node, index: int, rest: str) -> Node:
        """Split *node* at *index* and attach *rest* under the new branch.

        Returns the node that now marks the inserted key as terminal.
        """
        parent = node.parent
        if parent is None:
            raise TrieCorruptionError("cannot split the root")

        prefix, remainder = node.label[:index], node.label[index:]
        branch = Node(label=prefix)
        parent.replace_child(node, branch)
        node.label = remainder
        branch.add_child(node)

        if rest:
            added = Node(label=rest, color=Color.TERMINAL)
            branch.add_child(added)
        else:
            branch.color = Color.TERMINAL
            added = branch
        logger.debug("Split %r into %r + %r", prefix + remainder, prefix, remainder)
        return added

    def _fuse(self, node: Node) -> Node:
        """Merge *node* into its only child, which takes its place."""
        parent = node.parent
        if parent is None:
            raise TrieCorruptionError("cannot fuse the root")
        child = node.only_child()
        child.label = node.label + child.label
        parent.replace_child(node, child)
        node.children.clear()
        logger.debug("Fused %r into %r", node.label, child.label)
        return child
