import pandas as pd
import pytest

from dmrflow.config import Config, standardize_chromosome
from dmrflow.sites import (Site, SiteFilter, SiteLoader, infer_separator,
                           load_probe_list)
from dmrflow.utils import InvalidInput


@pytest.mark.parametrize(
    "name, expected",
    [
        ("1", "chr1"),
        (1, "chr1"),
        ("chr1", "chr1"),
        ("7.0", "chr7"),
        ("x", "chrX"),
        ("chrx", "chrX"),
        ("MT", "chrM"),
        ("chrM", "chrM"),
        ("23", "chrX"),
        ("24", "chrY"),
    ],
)
def test_standardize_chromosome(name, expected):
    assert standardize_chromosome(name) == expected


class TestSite:
    def test_normalizes_fields(self):
        site = Site("cg01", "1", 100.0, "0.2", 0.01)

        assert site.chromosome == "chr1"
        assert site.position == 100
        assert isinstance(site.position, int)
        assert site.effect == pytest.approx(0.2)

    @pytest.mark.parametrize(
        "record",
        [
            {"chromosome": "chr1", "position": 1, "effect": 0.1},
            ("chr1", "abc", 0.1, 0.01),
            ("chr1", 1, 0.1, -0.01),
            ("chr1", 1, 0.1, float("nan")),
            "chr1",
        ],
    )
    def test_rejects_bad_records(self, record):
        with pytest.raises(InvalidInput):
            Site.from_record("cg01", record)

    def test_from_mapping_record(self):
        site = Site.from_record(
            "cg01", {"chromosome": "chr2", "position": 5, "effect": -0.1, "score": 0.2}
        )
        assert site == Site("cg01", "chr2", 5, -0.1, 0.2)

    def test_existing_site_must_match_key(self):
        site = Site("cg01", "chr1", 1, 0.1, 0.01)

        assert Site.from_record("cg01", site) is site
        with pytest.raises(InvalidInput):
            Site.from_record("cg02", site)


@pytest.mark.parametrize(
    "path, sep",
    [
        ("stats.csv", ","),
        ("stats.tsv", "\t"),
        ("stats.txt.gz", "\t"),
        ("stats.csv.gz", ","),
        ("genes.bed", "\t"),
    ],
)
def test_infer_separator(path, sep):
    assert infer_separator(path) == sep


class TestSiteLoader:
    def test_load_default_columns(self, stats_csv):
        sites = SiteLoader().load(stats_csv)

        assert list(sites.columns) == ["chromosome", "position", "effect", "score"]
        assert sites.index.name == "site_id"
        assert sites.loc["cg01", "chromosome"] == "chr1"
        assert sites.loc["cg06", "chromosome"] == "chrX"
        assert sites.loc["cg05", "position"] == 5000
        assert sites.loc["cg04", "effect"] == pytest.approx(-0.2)

    def test_load_from_configured_path(self, stats_csv):
        config = Config(sites={"stats_file": str(stats_csv)})
        assert len(SiteLoader(config).load()) == 6

    def test_custom_column_names(self):
        df = pd.DataFrame(
            {
                "Name": ["a", "b"],
                "CHR": [3, 3],
                "MAPINFO": [10, 20],
                "logFC": [0.5, 0.4],
                "adj.P.Val": [0.01, 0.02],
            }
        )
        config = Config(
            sites={
                "columns": {
                    "id": "Name",
                    "chromosome": "CHR",
                    "position": "MAPINFO",
                    "effect": "logFC",
                    "score": "adj.P.Val",
                }
            }
        )

        sites = SiteLoader(config).load(df)

        assert list(sites.index) == ["a", "b"]
        assert set(sites["chromosome"]) == {"chr3"}

    def test_partial_column_override_keeps_defaults(self, stats_csv):
        config = Config(sites={"columns": {"score": "p_value"}})
        assert config.sites["columns"]["id"] == "probe_id"
        assert len(SiteLoader(config).load(stats_csv)) == 6

    def test_manifest_join(self):
        stats = pd.DataFrame(
            {"probe_id": ["a", "b", "c"], "delta_beta": [0.1, 0.2, 0.3], "p_value": [0.01, 0.02, 0.03]}
        )
        manifest = pd.DataFrame(
            {"probe_id": ["a", "b", "z"], "chr": ["chr5", "chr5", "chr6"], "pos": [10, 20, 30]}
        )

        sites = SiteLoader().load(stats, manifest=manifest)

        assert list(sites.index) == ["a", "b"]
        assert list(sites["position"]) == [10, 20]

    def test_missing_column(self):
        df = pd.DataFrame({"probe_id": ["a"], "chr": ["1"], "pos": [1]})
        with pytest.raises(InvalidInput, match="missing columns"):
            SiteLoader().load(df)

    def test_duplicate_identifiers(self):
        df = pd.DataFrame(
            {
                "probe_id": ["a", "a"],
                "chr": ["1", "1"],
                "pos": [1, 2],
                "delta_beta": [0.1, 0.1],
                "p_value": [0.01, 0.01],
            }
        )
        with pytest.raises(InvalidInput, match="Duplicate"):
            SiteLoader().load(df)

    def test_fractional_positions(self):
        df = pd.DataFrame(
            {
                "probe_id": ["a"],
                "chr": ["1"],
                "pos": [1.5],
                "delta_beta": [0.1],
                "p_value": [0.01],
            }
        )
        with pytest.raises(InvalidInput, match="Non-integer"):
            SiteLoader().load(df)

    def test_no_statistics(self):
        with pytest.raises(InvalidInput):
            SiteLoader().load()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            SiteLoader().load(tmp_path / "absent.csv")


@pytest.fixture
def site_table():
    return pd.DataFrame(
        {
            "chromosome": ["chr1", "chr1", "chrY", "chr2", "chrUn", "chr3"],
            "position": pd.array([1, 2, 3, 4, 5, None], dtype="Int64"),
            "effect": [0.1, 0.2, 0.3, 0.4, 0.5, 0.6],
            "score": [0.01, 0.02, 0.03, None, 0.05, 0.06],
        },
        index=["a", "b", "c", "d", "e", "f"],
    )


class TestSiteFilter:
    def test_drops_missing_values(self, site_table):
        result = SiteFilter().apply(site_table)

        assert result.removed == {"missing_values": 2}
        assert result.n_input == 6
        assert result.n_kept == 4
        assert result.n_removed == 2

    def test_rules_apply_in_order(self, site_table, tmp_path):
        probes = tmp_path / "cross_reactive.txt"
        probes.write_text("# cross-reactive probes\nb\n\nzzz\n")
        config = Config(
            filtering={
                "exclude_chromosomes": ["Y"],
                "exclude_probes_file": str(probes),
                "drop_unordered_chromosomes": True,
            }
        )

        result = SiteFilter(config).apply(site_table)

        assert result.removed == {
            "missing_values": 2,
            "excluded_chromosomes": 1,
            "excluded_probes": 1,
            "unordered_chromosomes": 1,
        }
        assert list(result.sites.index) == ["a"]

    def test_explicit_probe_exclusion(self, site_table):
        result = SiteFilter().apply(site_table, exclude_probes=["a", "c"])
        assert list(result.sites.index) == ["b", "e"]

    def test_keep_missing_when_disabled(self, site_table):
        config = Config(filtering={"drop_missing": False})
        assert SiteFilter(config).apply(site_table).n_kept == 6


def test_load_probe_list_reads_first_column(tmp_path):
    path = tmp_path / "probes.csv"
    path.write_text("cg001,reason\ncg002\tother\n  \n#comment\n")

    assert load_probe_list(path) == {"cg001", "cg002"}
