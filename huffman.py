import heapq
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from errors import EmptyAlphabet, MalformedDescription

SYMBOL_COUNT = 256 # byte values 0..255
PSEUDO_EOF = SYMBOL_COUNT # synthetic end-of-stream symbol, outside the byte range


@dataclass(frozen=True)
class HuffmanNode: # Node for Huffman tree, children are arena indices
    symbol: Optional[int] # byte, PSEUDO_EOF, or None for internal nodes
    frequency: int
    left: Optional[int] = None
    right: Optional[int] = None

    @property
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None


class HuffmanTree:
    """
    Arena of nodes plus the index of the root

    The arena is checked once here and never changes afterwards: every
    internal node has two children and every node hangs under the root
    exactly once.
    """

    def __init__(self, nodes: Sequence[HuffmanNode], root: int):
        self._nodes: Tuple[HuffmanNode, ...] = tuple(nodes)
        self._root = root
        self._validate()

    def _validate(self) -> None:
        n = len(self._nodes)
        if not 0 <= self._root < n:
            raise MalformedDescription(f"root index {self._root} outside arena of {n} nodes")
        seen = [False] * n
        stack = [self._root]
        while stack:
            i = stack.pop()
            if seen[i]:
                raise MalformedDescription(f"node {i} is reachable more than once")
            seen[i] = True
            node = self._nodes[i]
            if node.is_leaf:
                if node.symbol is None:
                    raise MalformedDescription(f"leaf {i} has no symbol")
                continue
            if node.left is None or node.right is None:
                raise MalformedDescription(f"internal node {i} does not have two children")
            for child in (node.left, node.right):
                if not 0 <= child < n:
                    raise MalformedDescription(f"child index {child} outside arena of {n} nodes")
                stack.append(child)
        if not all(seen):
            raise MalformedDescription("arena holds nodes that are not part of the tree")

    @property
    def root(self) -> int:
        return self._root

    @property
    def total_frequency(self) -> int:
        return self._nodes[self._root].frequency

    def node(self, index: int) -> HuffmanNode:
        return self._nodes[index]

    def is_leaf(self, index: int) -> bool:
        return self._nodes[index].is_leaf

    def __len__(self) -> int:
        return len(self._nodes)

    def leaves(self) -> List[int]:
        """
        Leaf symbols in left-to-right order
        """
        out = []
        stack = [self._root]
        while stack:
            node = self._nodes[stack.pop()]
            if node.is_leaf:
                out.append(node.symbol)
            else:
                stack.append(node.right) # right pushed first so left is visited first
                stack.append(node.left)
        return out

    @property
    def symbols(self) -> List[int]:
        return sorted(self.leaves())

    def depth(self) -> int:
        best = 0
        stack = [(self._root, 0)]
        while stack:
            i, d = stack.pop()
            node = self._nodes[i]
            if node.is_leaf:
                best = max(best, d)
            else:
                stack.append((node.left, d + 1))
                stack.append((node.right, d + 1))
        return best

    def shape(self):
        """
        Nested tuples of leaf symbols, e.g. ((97, 98), 99)
        Two trees with the same shape place the same symbols at the same paths
        """
        built: Dict[int, object] = {}
        stack = [(self._root, False)]
        while stack:
            i, expanded = stack.pop()
            node = self._nodes[i]
            if node.is_leaf:
                built[i] = node.symbol
            elif expanded:
                built[i] = (built.pop(node.left), built.pop(node.right))
            else:
                stack.append((i, True))
                stack.append((node.right, False))
                stack.append((node.left, False))
        return built[self._root]

    def __eq__(self, other) -> bool:
        if not isinstance(other, HuffmanTree):
            return NotImplemented
        return self.shape() == other.shape()

    def __repr__(self) -> str:
        return f"HuffmanTree(leaves={len(self.leaves())}, nodes={len(self)}, depth={self.depth()})"


def freq_table(data: bytes) -> Dict[int, int]: # symbol -> count, only symbols that occur
    ft: Dict[int, int] = {}
    for b in data:
        ft[b] = ft.get(b, 0) + 1
    return ft


def build_huffman_tree(frequency_table: Dict[int, int], pseudo_eof: bool = False) -> HuffmanTree:
    """
    Greedy merge of the two lowest-frequency nodes until one node is left

    Ties on frequency go to the node created first. Leaves are created in
    ascending symbol order (PSEUDO_EOF last), merged nodes in merge order.
    The first node popped becomes the left child.
    """
    nodes: List[HuffmanNode] = []
    for symbol in sorted(frequency_table):
        frequency = frequency_table[symbol]
        if frequency <= 0:
            continue
        if not 0 <= symbol < SYMBOL_COUNT:
            raise ValueError(f"symbol {symbol} is outside the byte range")
        nodes.append(HuffmanNode(symbol, frequency))
    if pseudo_eof:
        nodes.append(HuffmanNode(PSEUDO_EOF, 1))
    if not nodes:
        raise EmptyAlphabet()

    # (frequency, creation order, arena index); creation order equals the index
    priority_queue = [(node.frequency, i, i) for i, node in enumerate(nodes)]
    heapq.heapify(priority_queue)

    # Build the tree
    while len(priority_queue) > 1:
        left_freq, _, left = heapq.heappop(priority_queue)
        right_freq, _, right = heapq.heappop(priority_queue)
        nodes.append(HuffmanNode(None, left_freq + right_freq, left, right)) # internal node with combined frequency
        index = len(nodes) - 1
        heapq.heappush(priority_queue, (left_freq + right_freq, index, index))

    return HuffmanTree(nodes, priority_queue[0][2])


def generate_huffman_codes(tree: HuffmanTree) -> Dict[int, str]: # symbol -> string of '0'/'1'
    if tree.is_leaf(tree.root):
        # a zero-length code cannot be written to a bit stream
        return {tree.node(tree.root).symbol: '0'}

    codes: Dict[int, str] = {}
    stack = [(tree.root, '')]
    while stack:
        index, current_code = stack.pop()
        node = tree.node(index)
        if node.is_leaf: # reached a leaf -> assign code
            codes[node.symbol] = current_code
            continue
        stack.append((node.right, current_code + '1'))
        stack.append((node.left, current_code + '0'))
    return codes


def is_prefix_free(codes: Dict[int, str]) -> bool:
    ordered = sorted(codes.values())
    # in sorted order a prefix always sorts directly before some code it prefixes
    for a, b in zip(ordered, ordered[1:]):
        if b.startswith(a):
            return False
    return True


def average_code_length(codes: Dict[int, str], frequency_table: Dict[int, int]) -> float:
    total = sum(f for s, f in frequency_table.items() if f > 0)
    if total == 0:
        return 0.0
    return sum(len(codes[s]) * f for s, f in frequency_table.items() if f > 0) / total
