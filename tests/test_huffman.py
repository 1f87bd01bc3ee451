"""Tree construction, code derivation, encode and decode."""

from __future__ import annotations

import heapq
import random
from collections import Counter

import pytest

import huffman as huff
from huffman import Internal, Leaf


def optimal_cost(weights) -> int:
    """Sum of all merge weights, the minimum weighted path length for n >= 2."""
    heap = list(weights)
    heapq.heapify(heap)
    cost = 0
    while len(heap) > 1:
        merged = heapq.heappop(heap) + heapq.heappop(heap)
        cost += merged
        heapq.heappush(heap, merged)
    return cost


def internal_nodes(root):
    stack = [root]
    while stack:
        node = stack.pop()
        if isinstance(node, Internal):
            yield node
            stack.extend((node.left, node.right))


# ===========================================================================
# Known tables
# ===========================================================================


class TestScenario:
    def test_codes(self, scenario_weights, scenario_codes) -> None:
        root = huff.build_huffman_tree(scenario_weights)
        assert huff.generate_huffman_codes(root) == scenario_codes

    def test_encode_cue(self, scenario_weights) -> None:
        codec = huff.HuffmanCodec.from_weights(scenario_weights)
        assert codec.encode("cue") == "1110" + "100" + "0"

    def test_decode_cue(self, scenario_weights) -> None:
        root = huff.build_huffman_tree(scenario_weights)
        assert "".join(huff.huffman_decode("11101000", root, 3)) == "cue"
        assert "".join(huff.huffman_decode("11101000", root)) == "cue"

    def test_trailing_padding_ignored_with_count(self, scenario_weights) -> None:
        root = huff.build_huffman_tree(scenario_weights)
        assert "".join(huff.huffman_decode("11101000" + "111", root, 3)) == "cue"

    def test_root_weight_is_total(self, scenario_weights) -> None:
        root = huff.build_huffman_tree(scenario_weights)
        assert root.weight == sum(scenario_weights.values())

    def test_leaves_left_to_right(self, scenario_weights) -> None:
        root = huff.build_huffman_tree(scenario_weights)
        assert [leaf.symbol for leaf in huff.iter_leaves(root)] == list("eudlczkm")
        assert huff.tree_height(root) == 6


class TestTieBreak:
    def test_equal_leaves_order_by_symbol(self) -> None:
        codes = huff.generate_huffman_codes(huff.build_huffman_tree({"d": 1, "c": 1, "b": 1, "a": 1}))
        assert codes == {"a": "00", "b": "01", "c": "10", "d": "11"}

    def test_leaf_before_internal_of_same_weight(self) -> None:
        root = huff.build_huffman_tree({"a": 1, "b": 1, "c": 2})
        assert root == Internal(4, Leaf("c", 2), Internal(2, Leaf("a", 1), Leaf("b", 1)))

    def test_internal_nodes_order_by_creation(self) -> None:
        # both merges weigh 2, the first one created goes left
        root = huff.build_huffman_tree({"w": 1, "x": 1, "y": 1, "z": 1})
        assert root.left == Internal(2, Leaf("w", 1), Leaf("x", 1))
        assert root.right == Internal(2, Leaf("y", 1), Leaf("z", 1))

    def test_zero_weights(self) -> None:
        codes = huff.generate_huffman_codes(huff.build_huffman_tree({"a": 0, "b": 0, "c": 5}))
        assert codes == {"a": "00", "b": "01", "c": "1"}

    def test_insertion_order_does_not_matter(self, scenario_weights) -> None:
        reordered = dict(reversed(list(scenario_weights.items())))
        assert huff.build_huffman_tree(reordered) == huff.build_huffman_tree(scenario_weights)


class TestSingleSymbol:
    def test_root_is_leaf_with_one_bit_code(self) -> None:
        root = huff.build_huffman_tree({"x": 5})
        assert root == Leaf("x", 5)
        assert huff.generate_huffman_codes(root) == {"x": "0"}
        assert huff.tree_height(root) == 0

    def test_round_trip(self) -> None:
        codec = huff.HuffmanCodec.from_weights({"x": 5})
        assert codec.encode("xxxx") == "0000"
        assert codec.decode_text("0000", 4) == "xxxx"
        assert codec.decode_text("0000") == "xxxx"

    def test_one_bit_is_corrupt(self) -> None:
        codec = huff.HuffmanCodec.from_weights({"x": 5})
        with pytest.raises(huff.CorruptStream):
            codec.decode("01")

    def test_count_beyond_stream(self) -> None:
        codec = huff.HuffmanCodec.from_weights({"x": 1})
        with pytest.raises(huff.CorruptStream):
            codec.decode("00", 3)


# ===========================================================================
# Properties over random tables
# ===========================================================================


class TestProperties:
    def test_round_trip(self, random_weights) -> None:
        rng = random.Random(7)
        for table in random_weights:
            codec = huff.HuffmanCodec.from_weights(table)
            symbols = list(table)
            data = [rng.choice(symbols) for _ in range(200)]
            assert codec.decode(codec.encode(data), len(data)) == data
            assert codec.decode(codec.encode(data)) == data

    def test_prefix_free(self, random_weights) -> None:
        for table in random_weights:
            codes = huff.generate_huffman_codes(huff.build_huffman_tree(table))
            assert set(codes) == set(table)
            assert all(codes.values())
            assert huff.is_prefix_free(codes.values())

    def test_deterministic(self, random_weights) -> None:
        for table in random_weights:
            a = huff.build_huffman_tree(table)
            b = huff.build_huffman_tree(dict(table))
            assert a == b
            assert huff.generate_huffman_codes(a) == huff.generate_huffman_codes(b)

    def test_weighted_path_length_is_optimal(self, random_weights) -> None:
        for table in random_weights:
            if len(table) < 2:
                continue
            root = huff.build_huffman_tree(table)
            codes = huff.generate_huffman_codes(root)
            wpl = huff.weighted_path_length(codes, table)
            assert wpl == optimal_cost(table.values())
            assert wpl == sum(node.weight for node in internal_nodes(root))

    def test_full_tree(self, random_weights) -> None:
        for table in random_weights:
            root = huff.build_huffman_tree(table)
            for node in internal_nodes(root):
                assert node.weight == node.left.weight + node.right.weight
            if len(table) >= 2:
                codes = huff.generate_huffman_codes(root)
                # Kraft equality holds for every full binary tree
                assert sum(2.0 ** -len(c) for c in codes.values()) == pytest.approx(1.0)


# ===========================================================================
# Errors
# ===========================================================================


class TestErrors:
    def test_empty_alphabet(self) -> None:
        with pytest.raises(huff.EmptyAlphabet):
            huff.build_huffman_tree({})
        with pytest.raises(ValueError):
            huff.HuffmanCodec.from_weights(Counter())

    @pytest.mark.parametrize("weight", [-1, 1.5, "3", None, True])
    def test_invalid_weight(self, weight) -> None:
        with pytest.raises(huff.InvalidWeight):
            huff.build_huffman_tree({"a": 1, "b": weight})

    def test_unknown_symbol(self, scenario_weights) -> None:
        codec = huff.HuffmanCodec.from_weights(scenario_weights)
        with pytest.raises(huff.UnknownSymbol) as exc_info:
            codec.encode("cat")
        assert exc_info.value.symbol == "a"
        assert isinstance(exc_info.value, LookupError)
        assert "'a'" in str(exc_info.value)

    def test_count_larger_than_stream(self, scenario_weights) -> None:
        root = huff.build_huffman_tree(scenario_weights)
        with pytest.raises(huff.CorruptStream):
            huff.huffman_decode("11101000", root, 4)

    def test_stream_ends_mid_code(self, scenario_weights) -> None:
        root = huff.build_huffman_tree(scenario_weights)
        with pytest.raises(huff.CorruptStream):
            huff.huffman_decode("111", root)
        with pytest.raises(huff.CorruptStream):
            huff.huffman_decode("1110111", root, 2)

    def test_invalid_bit(self, scenario_weights) -> None:
        root = huff.build_huffman_tree(scenario_weights)
        with pytest.raises(huff.CorruptStream):
            huff.huffman_decode("10x", root)

    def test_negative_count(self, scenario_weights) -> None:
        root = huff.build_huffman_tree(scenario_weights)
        with pytest.raises(ValueError):
            huff.huffman_decode("0", root, -1)

    def test_all_errors_share_base(self) -> None:
        for exc in (huff.EmptyAlphabet, huff.InvalidWeight, huff.UnknownSymbol, huff.CorruptStream):
            assert issubclass(exc, huff.HuffmanError)


# ===========================================================================
# Other symbol and bit types, helpers
# ===========================================================================


class TestMisc:
    def test_byte_symbols(self) -> None:
        data = b"abracadabra"
        codec = huff.HuffmanCodec.from_weights(Counter(data))
        assert bytes(codec.decode(codec.encode(data), len(data))) == data

    def test_integer_bits(self, scenario_weights) -> None:
        root = huff.build_huffman_tree(scenario_weights)
        assert huff.huffman_decode([1, 1, 1, 0, 1, 0, 0, 0], root) == ["c", "u", "e"]

    def test_zero_count(self, scenario_weights) -> None:
        root = huff.build_huffman_tree(scenario_weights)
        assert huff.huffman_decode("", root, 0) == []
        assert huff.huffman_decode("", root) == []

    @pytest.mark.parametrize(
        "codes, expected",
        [
            (["0", "10", "11"], True),
            (["0", "01"], False),
            (["10", "0", "101"], False),
            (["1"], True),
        ],
    )
    def test_is_prefix_free(self, codes, expected) -> None:
        assert huff.is_prefix_free(codes) is expected

    def test_average_code_length(self, scenario_weights, scenario_codes) -> None:
        wpl = huff.weighted_path_length(scenario_codes, scenario_weights)
        assert wpl == 785
        assert huff.average_code_length(scenario_codes, scenario_weights) == pytest.approx(785 / 306)
        assert huff.average_code_length({"a": "0", "b": "1"}, {"a": 0, "b": 0}) == 0.0

    def test_codec_is_read_only(self, scenario_weights) -> None:
        codec = huff.HuffmanCodec.from_weights(scenario_weights)
        with pytest.raises(TypeError):
            codec.codes["e"] = "1"
        with pytest.raises(AttributeError):
            codec.root = None
        assert repr(codec) == "HuffmanCodec(symbols=8, weight=306)"

    def test_nodes_are_frozen(self) -> None:
        leaf = Leaf("a", 1)
        with pytest.raises(AttributeError):
            leaf.weight = 2
