import pickle

import numpy as np
import pytest

from deepcar.chromosome import Chromosome
from deepcar.persistence import best_chromosome_data, load_population, save_population


def test_save_and_load(tmp_path):
    path = str(tmp_path / "trained_models" / "population.pkl")
    chromosomes = [Chromosome(genes=[1.0, 2.0], fitness=3.0), Chromosome(genes=[4.0, 5.0], fitness=8.0)]
    assert save_population(chromosomes, 4, path)

    data, generation = load_population(path)
    assert generation == 4
    assert len(data["chromosomes"]) == 2
    np.testing.assert_array_equal(data["chromosomes"][1]["genes"], [4.0, 5.0])
    assert best_chromosome_data(data)["fitness"] == 8.0


def test_load_missing_file(tmp_path):
    assert load_population(str(tmp_path / "nothing.pkl")) == (None, 0)


def test_load_corrupt_file(tmp_path):
    path = tmp_path / "broken.pkl"
    path.write_bytes(b"")
    assert load_population(str(path)) == (None, 0)


@pytest.mark.parametrize("payload", [
    {"foo": 1},
    [1.0, 2.0],
    {"generation": 3, "chromosomes": None},
    {"generation": 3, "chromosomes": [{"fitness": 1.0}]},
])
def test_load_unexpected_layout(tmp_path, payload):
    path = tmp_path / "other.pkl"
    path.write_bytes(pickle.dumps(payload))
    assert load_population(str(path)) == (None, 0)


def test_save_to_unwritable_location(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    assert not save_population([Chromosome(genes=[1.0])], 1, str(blocker / "population.pkl"))


def test_best_of_empty_population():
    assert best_chromosome_data(None) is None
    assert best_chromosome_data({"generation": 0, "chromosomes": []}) is None
