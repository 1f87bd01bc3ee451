import heapq
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Hashable, Iterable, Iterator, List, Mapping, Optional, Union


class HuffmanError(Exception):
    """Base class for everything the Huffman engine raises."""


class EmptyAlphabet(HuffmanError, ValueError):
    pass


class InvalidWeight(HuffmanError, ValueError):
    pass


class UnknownSymbol(HuffmanError, LookupError):
    def __init__(self, symbol):
        super().__init__(f"symbol {symbol!r} has no code in this table")
        self.symbol = symbol


class CorruptStream(HuffmanError, ValueError):
    pass


@dataclass(frozen=True)
class Leaf: # leaf of the Huffman tree
    symbol: Hashable
    weight: int


@dataclass(frozen=True)
class Internal: # internal node, always exactly two children
    weight: int
    left: "Node"
    right: "Node"


Node = Union[Leaf, Internal]


def _check_weight(symbol, weight) -> int:
    if isinstance(weight, bool) or not isinstance(weight, int):
        raise InvalidWeight(f"weight for {symbol!r} must be an integer, got {weight!r}")
    if weight < 0:
        raise InvalidWeight(f"weight for {symbol!r} must be non-negative, got {weight}")
    return weight


def build_huffman_tree(frequency_table: Mapping) -> Node: # frequency_table: dict of symbol -> weight
    """
    Greedy Huffman construction over a binary heap.

    Heap keys are (weight, kind, tiebreak): leaves (kind 0) order by symbol,
    internal nodes (kind 1) by creation order, and leaves sort before internal
    nodes of the same weight. The first node popped becomes the left child.
    """
    if not frequency_table:
        raise EmptyAlphabet("cannot build a Huffman tree from an empty weight table")

    priority_queue = []
    for symbol, weight in frequency_table.items():
        leaf = Leaf(symbol, _check_weight(symbol, weight))
        priority_queue.append((leaf.weight, 0, symbol, leaf))
    heapq.heapify(priority_queue)

    serial = 0
    while len(priority_queue) > 1:
        left = heapq.heappop(priority_queue)[-1]
        right = heapq.heappop(priority_queue)[-1]
        merged = Internal(left.weight + right.weight, left, right)
        heapq.heappush(priority_queue, (merged.weight, 1, serial, merged))
        serial += 1

    return priority_queue[0][-1] # root of the tree


def generate_huffman_codes(root: Node) -> Dict[Hashable, str]: # root: root of the Huffman tree
    if isinstance(root, Leaf):
        # no branch to take, the lone symbol still needs one bit
        return {root.symbol: "0"}

    codes = {}
    stack = [(root, "")]
    while stack:
        node, prefix = stack.pop()
        if isinstance(node, Leaf):
            codes[node.symbol] = prefix
            continue
        # right first so the left subtree is visited first
        stack.append((node.right, prefix + "1"))
        stack.append((node.left, prefix + "0"))
    return codes


def huffman_encode(data: Iterable, code_map: Mapping[Hashable, str]) -> str: # data: symbols to encode
    out = []
    for symbol in data:
        try:
            out.append(code_map[symbol])
        except KeyError:
            raise UnknownSymbol(symbol) from None
    return "".join(out)


def huffman_decode(bits: Iterable, root: Node, count: Optional[int] = None) -> List:
    """
    Walk the tree bit by bit, emitting a symbol at every leaf.

    With ``count`` the walk stops after that many symbols and any remaining
    bits are ignored as padding. Without it the end of ``bits`` terminates
    the stream, and it must end on a symbol boundary.
    """
    if count is not None and count < 0:
        raise ValueError(f"count must be non-negative, got {count}")

    decoded = []
    if count == 0:
        return decoded

    single = isinstance(root, Leaf)
    node = root
    for bit in bits:
        if bit == "0" or bit == 0:
            if single:
                decoded.append(root.symbol)
            else:
                node = node.left
        elif bit == "1" or bit == 1:
            if single:
                raise CorruptStream("bit 1 is not a valid code for a single-symbol tree")
            node = node.right
        else:
            raise CorruptStream(f"invalid bit {bit!r}")

        if not single and isinstance(node, Leaf): # reached a leaf
            decoded.append(node.symbol)
            node = root

        if count is not None and len(decoded) == count:
            return decoded

    if count is not None:
        raise CorruptStream(f"stream ended after {len(decoded)} of {count} symbols")
    if node is not root:
        raise CorruptStream(f"stream ended in the middle of a code after {len(decoded)} symbols")
    return decoded


def iter_leaves(root: Node) -> Iterator[Leaf]:
    stack = [root]
    while stack:
        node = stack.pop()
        if isinstance(node, Leaf):
            yield node
        else:
            stack.append(node.right)
            stack.append(node.left)


def tree_height(root: Node) -> int:
    height = 0
    stack = [(root, 0)]
    while stack:
        node, depth = stack.pop()
        if isinstance(node, Leaf):
            height = max(height, depth)
        else:
            stack.append((node.left, depth + 1))
            stack.append((node.right, depth + 1))
    return height


def is_prefix_free(codes: Iterable[str]) -> bool:
    ordered = sorted(codes)
    # in sorted order a prefix is always directly followed by one of its extensions
    for a, b in zip(ordered, ordered[1:]):
        if b.startswith(a):
            return False
    return True


def weighted_path_length(code_map: Mapping[Hashable, str], frequency_table: Mapping) -> int:
    return sum(frequency_table[s] * len(code) for s, code in code_map.items())


def average_code_length(code_map: Mapping[Hashable, str], frequency_table: Mapping) -> float:
    total = sum(frequency_table[s] for s in code_map)
    if total == 0:
        return 0.0
    return weighted_path_length(code_map, frequency_table) / total


class HuffmanCodec:
    """A tree and its code table, built once from a weight table and read-only afterwards."""

    __slots__ = ("_root", "_codes")

    def __init__(self, root: Node):
        self._root = root
        self._codes = MappingProxyType(generate_huffman_codes(root))

    @classmethod
    def from_weights(cls, frequency_table: Mapping) -> "HuffmanCodec":
        return cls(build_huffman_tree(frequency_table))

    @property
    def root(self) -> Node:
        return self._root

    @property
    def codes(self) -> Mapping[Hashable, str]:
        return self._codes

    def encode(self, data: Iterable) -> str:
        return huffman_encode(data, self._codes)

    def decode(self, bits: Iterable, count: Optional[int] = None) -> List:
        return huffman_decode(bits, self._root, count)

    def decode_text(self, bits: Iterable, count: Optional[int] = None) -> str:
        return "".join(self.decode(bits, count))

    def __repr__(self):
        return f"HuffmanCodec(symbols={len(self._codes)}, weight={self._root.weight})"
