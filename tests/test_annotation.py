import pandas as pd
import pytest

from dmrflow.config import Config
from dmrflow.regions import FeatureAnnotator, Region
from dmrflow.utils import InvalidInput


def make_region(chromosome, start, end):
    return Region(
        chromosome=chromosome,
        start=start,
        end=end,
        n_sites=2,
        score=0.001,
        effect=0.2,
        min_score=0.001,
        max_abs_effect=0.3,
        direction="hyper",
        site_ids=("a", "b"),
    )


@pytest.fixture
def regions():
    return [make_region("chr1", 100, 150), make_region("chr1", 400, 401)]


def test_bed_features_overlap(genes_bed, regions):
    annotator = FeatureAnnotator()
    annotator.load_features(genes_bed)

    annotated = annotator.annotate(regions)

    assert annotated[0].features == ("GENE_A",)
    assert annotated[1].features == ()
    # Inputs are left untouched
    assert regions[0].features == ()


def test_bed_start_is_shifted_to_one_based(genes_bed):
    annotator = FeatureAnnotator()
    features = annotator.load_features(genes_bed)

    assert features["chr1"]["start"].tolist() == [51, 391]
    assert features["chr1"]["end"].tolist() == [120, 395]
    assert annotator.overlapping_features("chr1", 50, 50) == []
    assert annotator.overlapping_features("chr1", 51, 51) == ["GENE_A"]


def test_flank_extends_window(genes_bed, regions):
    annotator = FeatureAnnotator(Config(annotation={"flank": 10}))
    annotator.load_features(genes_bed)

    annotated = annotator.annotate(regions)

    assert annotated[1].features == ("GENE_B",)


def test_features_from_configured_file_are_loaded_lazily(genes_bed, regions):
    annotator = FeatureAnnotator(Config(annotation={"features_file": str(genes_bed)}))
    assert annotator.annotate(regions)[0].features == ("GENE_A",)


def test_track_lines_are_skipped(tmp_path):
    path = tmp_path / "genes.bed"
    path.write_text(
        'track name="genes" description="test"\n'
        "# comment\n"
        "chr1\t0\t1000\tGENE_A\t0\t+\n"
    )

    annotator = FeatureAnnotator()
    annotator.load_features(path)

    assert annotator.overlapping_features("chr1", 10, 20) == ["GENE_A"]


def test_tabular_features_with_aliases(tmp_path):
    path = tmp_path / "genes.tsv"
    pd.DataFrame(
        {
            "Chromosome": ["1", "1", "1"],
            "Start": [90, 140, 200],
            "End": [110, 160, 300],
            "Symbol": ["A", "B", "A"],
        }
    ).to_csv(path, sep="\t", index=False)

    annotator = FeatureAnnotator(Config(annotation={"name_column": "Symbol"}))
    annotator.load_features(path)

    assert annotator.overlapping_features("chr1", 100, 250) == ["A", "B"]


def test_dataframe_features_drop_inverted_intervals():
    features = pd.DataFrame(
        {
            "chrom": ["chr2", "chr2"],
            "start": [100, 500],
            "end": [200, 400],
            "name": ["ok", "inverted"],
        }
    )

    annotator = FeatureAnnotator()
    loaded = annotator.load_features(features)

    assert loaded["chr2"]["name"].tolist() == ["ok"]
    assert annotator.overlapping_features("chr3", 1, 1000) == []


def test_missing_feature_columns():
    with pytest.raises(InvalidInput, match="missing columns"):
        FeatureAnnotator().load_features(pd.DataFrame({"chrom": ["chr1"], "start": [1]}))


def test_no_features_configured():
    with pytest.raises(InvalidInput):
        FeatureAnnotator().load_features()


def test_negative_flank():
    with pytest.raises(InvalidInput):
        FeatureAnnotator(Config(annotation={"flank": -5}))


def test_gzipped_bed_with_track_line(tmp_path):
    import gzip

    path = tmp_path / "genes.bed.gz"
    with gzip.open(path, "wt") as f:
        f.write('track name="genes"\n')
        f.write("chr1\t50\t120\tGENE_A\t0\t+\n")
        f.write("chr2\t10000\t20000\tGENE_C\t0\t+\n")

    annotator = FeatureAnnotator()
    features = annotator.load_features(path)

    assert features["chr1"]["start"].tolist() == [51]
    assert annotator.overlapping_features("chr2", 15000, 15001) == ["GENE_C"]
