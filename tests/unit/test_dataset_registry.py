import pytest

from nudgenet.data import available_datasets, get_dataset, register_dataset
from nudgenet.data.batches import TrainingBatch
from nudgenet.data.registry import DatasetSpec


def test_builtin_datasets_registered():
    assert {"and", "or", "xor", "parity", "sine"} <= set(available_datasets())


def test_xor_truth_table():
    spec = get_dataset("xor")
    assert (spec.n_inputs, spec.n_outputs) == (2, 1)
    table = {example.inputs: example.expected[0] for example in spec.batch}
    assert table == {(0.0, 0.0): 0.0, (0.0, 1.0): 1.0, (1.0, 0.0): 1.0, (1.0, 1.0): 0.0}
    assert len(get_dataset("xor", repeat=3).batch) == 12


def test_parity_and_sine_shapes():
    parity = get_dataset("parity", n_bits=4)
    assert len(parity.batch) == 16
    parity.batch.check_dimensions(4, 1)
    sine = get_dataset("sine", n_points=10, noise=0.1, seed=2)
    assert len(sine.batch) == 10
    assert all(0.0 <= example.expected[0] <= 1.0 for example in sine.batch)
    assert sine.provenance["seed"] == 2


def test_unknown_dataset_lists_available():
    with pytest.raises(KeyError, match="xor"):
        get_dataset("mnist")


def test_register_custom_dataset():
    @register_dataset("identity-unit")
    def _identity(**_):
        batch = TrainingBatch.from_pairs([((0.0,), (0.0,)), ((1.0,), (1.0,))])
        return DatasetSpec(name="identity-unit", batch=batch, n_inputs=1, n_outputs=1)

    assert get_dataset("identity-unit").batch[1].expected == (1.0,)
