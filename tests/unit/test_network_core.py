import pytest

from nudgenet import Network, NetworkConfig, TrainingExample
from nudgenet.core.errors import (
    DimensionMismatchError,
    EmptyAccumulatorError,
    NodeKindError,
    ShapeError,
)
from nudgenet.core.node import ComputeNode, InputNode
from nudgenet.testing import assert_cache_state, assert_float_eq


def _new_nw() -> Network:
    return Network([5, 3, 2])


def test_init_by_shape():
    shape = [5, 3, 2]
    nw = Network(shape)
    assert nw.n_layers == len(shape)
    assert nw.shape == (5, 3, 2)
    for idx, layer in enumerate(nw.layers):
        assert len(layer) == shape[idx]


def test_few_layers_fast_fail():
    with pytest.raises(ShapeError, match="at least start and end layers"):
        Network([7])
    with pytest.raises(ShapeError):
        Network([3, 0, 1])


def test_nodes_know_layer_and_weight_length():
    shape = [5, 3, 2]
    nw = Network(shape)
    assert all(isinstance(node, InputNode) for node in nw.get_layer(0))
    for layer_idx in range(1, len(shape)):
        for node in nw.get_layer(layer_idx):
            assert isinstance(node, ComputeNode)
            assert node.layer_index == layer_idx
            assert node.weights.size == shape[layer_idx - 1]
            assert node.weights.tolist() == [0.0] * shape[layer_idx - 1]
            assert node.bias == 0.0


def test_config_defaults_and_overrides():
    assert Network([5, 3, 2]).config == NetworkConfig(shape=(5, 3, 2))
    assert Network([5, 3, 2]).learning_rate == 1.0
    config = NetworkConfig(shape=(10, 6, 3), learning_rate=3.5)
    nw = Network.with_config(config)
    assert nw.config == config
    assert nw.learning_rate == 3.5
    with pytest.raises(ValueError):
        NetworkConfig(shape=(2, 2), learning_rate=0.0)


def test_two_by_two_scenario():
    nw = Network([2, 2])
    assert_cache_state(nw.get_main_node(1, 1), None, None)
    value = nw.get_node(1, 1).get_value(nw)
    assert value == 0.5
    assert_cache_state(nw.get_main_node(1, 1), 0.0, value)

    nw.get_start_node(1).set_value(1.0)
    assert nw.get_start_node(1).value == 1.0
    nw.get_main_node(1, 1).set_weight(1, 1.0)
    assert nw.get_main_node(1, 1).get_weight(1) == 1.0
    nw.get_main_node(1, 1).invalidate()
    assert_cache_state(nw.get_main_node(1, 1), None, None)

    value = nw.get_main_node(1, 1).get_value(nw)
    assert_float_eq(value, 0.7310585786300049)
    assert_cache_state(nw.get_main_node(1, 1), 1.0, value)
    assert nw.get_outputs() == [0.5, value]
    assert_float_eq(nw.get_current_cost([0.5, 1.0]), 0.07232948812851325)


def test_current_cost_bad_expected_fails():
    with pytest.raises(DimensionMismatchError, match="Length of expected must match length of output"):
        _new_nw().get_current_cost([0.1] * 5)


def test_current_cost_zero():
    nw = _new_nw()
    nw.set_inputs([0.0] * 5)
    assert nw.get_current_cost([0.5, 0.5]) == 0.0


def test_current_cost_normal():
    nw = Network([7, 5, 5, 2])
    nw.set_inputs([0.0] * 7)
    assert_float_eq(nw.get_current_cost([0.9, 0.31]), 0.1961)


def test_invalidate_clears_every_compute_cache():
    nw = _new_nw()
    nw.get_outputs()
    for node in nw.compute_nodes():
        assert node.sum_cache is not None
        assert node.result_cache is not None
    nw.invalidate()
    for node in nw.compute_nodes():
        assert_cache_state(node, None, None)


def test_get_value_is_idempotent():
    nw = _new_nw()
    nw.randomize(seed=4)
    nw.set_inputs([0.1, 0.2, 0.3, 0.4, 0.5])
    first = nw.get_outputs()
    caches = [(n.sum_cache, n.result_cache) for n in nw.compute_nodes()]
    assert nw.get_outputs() == first
    assert [(n.sum_cache, n.result_cache) for n in nw.compute_nodes()] == caches

    nw.invalidate()
    assert nw.get_outputs() == first


def test_inputs_do_not_auto_invalidate():
    nw = Network([1, 1])
    nw.get_main_node(1, 0).set_weight(0, 1.0)
    stale = nw.get_output(0)
    nw.set_input(0, 2.0)
    assert nw.get_output(0) == stale
    assert nw.evaluate([2.0]) != [stale]


def test_set_input():
    nw = _new_nw()
    nw.set_input(3, 0.7)
    assert nw.get_node(0, 3).get_value(nw) == 0.7


def test_set_input_out_of_bounds():
    nw = _new_nw()
    with pytest.raises(IndexError, match="6"):
        nw.set_input(6, 0.7)
    with pytest.raises(IndexError):
        nw.set_input(-1, 0.7)


def test_set_inputs():
    nw = _new_nw()
    inputs = [0.2] * 5
    nw.set_inputs(inputs)
    assert [n.get_value(nw) for n in nw.get_layer(0)] == inputs


@pytest.mark.parametrize("length", [4, 6])
def test_set_inputs_wrong_length(length):
    with pytest.raises(DimensionMismatchError, match="number of inputs must match number of nodes in layer 0"):
        _new_nw().set_inputs([0.8] * length)


def test_variant_checked_accessors():
    nw = _new_nw()
    with pytest.raises(NodeKindError, match="no main nodes in layer 0"):
        nw.get_main_node(0, 0)
    with pytest.raises(NodeKindError):
        nw.get_node_as(1, 0, InputNode)
    with pytest.raises(IndexError):
        nw.get_main_node(3, 0)
    with pytest.raises(IndexError):
        nw.get_node(1, 3)
    assert isinstance(nw.get_main_node(2, 1), ComputeNode)
    assert nw.last_layer == nw.get_layer(2)


def test_request_nudges_end_seeds_negative_error_gradient():
    nw = Network([1, 2])
    nw.request_nudges_end([1.0, 0.0])
    first, second = nw.get_main_node(1, 0), nw.get_main_node(1, 1)
    assert first.pending_nudge == 1.0  # -2 * (0.5 - 1.0)
    assert second.pending_nudge == -1.0
    with pytest.raises(DimensionMismatchError):
        nw.request_nudges_end([1.0])


def test_train_on_data_leaves_no_pending_nudges():
    nw = Network([3, 4, 2])
    nw.randomize(seed=1)
    nw.train_on_data(TrainingExample([0.1, 0.9, 0.4], [1.0, 0.0]))
    for node in nw.compute_nodes():
        assert node.pending_nudge == 0.0
        assert node.nudge_count == 1


def test_empty_batch_is_an_error():
    nw = Network([2, 1])
    with pytest.raises(EmptyAccumulatorError):
        nw.train_on_batch([])
    with pytest.raises(EmptyAccumulatorError):
        nw.apply_nudges()


def test_randomize_is_seeded_and_invalidates():
    a = Network([2, 3, 1])
    b = Network([2, 3, 1])
    a.get_outputs()
    a.randomize(seed=9, scale=0.3)
    b.randomize(seed=9, scale=0.3)
    for node_a, node_b in zip(a.compute_nodes(), b.compute_nodes()):
        assert node_a.weights.tolist() == node_b.weights.tolist()
        assert node_a.bias == node_b.bias
        assert_cache_state(node_a, None, None)
    assert a.parameter_count() == 2 * 3 + 3 + 3 * 1 + 1
