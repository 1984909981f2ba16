import json

import pytest
import yaml

from dmrflow.config import (GENOME_BUILDS, Config, get_chromosome_order,
                            get_default_config, load_config, save_config,
                            validate_config)
from dmrflow.utils import InvalidInput


def test_defaults():
    config = get_default_config()

    assert config.genome_build == "hg38"
    assert config.regions["significance_cutoff"] == 0.05
    assert config.regions["score_method"] == "stouffer"
    assert config.regions["weights"] == "equal"
    assert config.sites["columns"]["score"] == "p_value"
    assert validate_config(config) == []


def test_partial_sections_are_merged_with_defaults():
    config = Config(regions={"max_gap": 250}, annotation={"flank": 500})

    assert config.regions["max_gap"] == 250
    assert config.regions["min_sites"] == 2
    assert config.annotation["flank"] == 500
    assert config.annotation["name_column"] == "name"


@pytest.mark.parametrize("suffix", [".yaml", ".json"])
def test_save_and_load(tmp_path, suffix):
    config = Config(project_name="epic_v2_case_control", regions={"max_gap": 750})
    path = tmp_path / f"config{suffix}"

    save_config(config, path)
    loaded = load_config(path)

    assert loaded.project_name == "epic_v2_case_control"
    assert loaded.regions["max_gap"] == 750
    assert loaded.to_dict() == config.to_dict()


def test_load_partial_yaml(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text(yaml.safe_dump({"regions": {"min_sites": 3}}))

    config = load_config(path)

    assert config.regions["min_sites"] == 3
    assert config.regions["max_gap"] == 1000


def test_load_empty_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")
    assert load_config(path).project_name == "DMRFlow_Analysis"


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "absent.yaml")


def test_load_unsupported_format(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("x = 1")
    with pytest.raises(ValueError):
        load_config(path)


def test_saved_json_is_plain(tmp_path):
    path = tmp_path / "config.json"
    save_config(Config(), path)
    assert json.loads(path.read_text())["regions"]["fdr_method"] == "fdr_bh"


@pytest.mark.parametrize(
    "kwargs, fragment",
    [
        ({"regions": {"significance_cutoff": 0}}, "cutoff"),
        ({"regions": {"significance_cutoff": 1.5}}, "cutoff"),
        ({"regions": {"max_gap": -1}}, "gap"),
        ({"regions": {"min_sites": 0}}, "Minimum sites"),
        ({"regions": {"min_effect": -0.1}}, "effect size"),
        ({"regions": {"score_method": "harmonic"}}, "Score method"),
        ({"regions": {"weights": "ivw"}}, "Weights"),
        ({"regions": {"effect_method": "mode"}}, "Effect method"),
        ({"sites": {"columns": {"id": ""}}}, "'id'"),
        ({"annotation": {"flank": -10}}, "flank"),
        ({"annotation": {"flank": True}}, "flank"),
        ({"regions": {"n_jobs": 0}}, "jobs"),
        ({"regions": {"n_jobs": "all"}}, "jobs"),
        ({"genome_build": "hg00"}, "Unknown genome build"),
        ({"chromosome_order": ["chr1", "1"]}, "Duplicate"),
    ],
)
def test_validate_config_issues(kwargs, fragment):
    issues = validate_config(Config(**kwargs))

    assert len(issues) == 1
    assert fragment in issues[0]


def test_named_builds():
    assert GENOME_BUILDS["hg38"][:2] == ["chr1", "chr2"]
    assert GENOME_BUILDS["hg38"][-3:] == ["chrX", "chrY", "chrM"]
    assert len(GENOME_BUILDS["mm10"]) == 22
    assert get_chromosome_order("hg19") == GENOME_BUILDS["hg19"]


def test_custom_order_is_standardized():
    assert get_chromosome_order(chromosome_order=["2", "chrx", "MT"]) == [
        "chr2",
        "chrX",
        "chrM",
    ]


def test_order_needs_build_or_list():
    with pytest.raises(InvalidInput):
        get_chromosome_order(genome_build=None)


def test_negative_worker_count_is_valid():
    assert validate_config(Config(regions={"n_jobs": -1})) == []
