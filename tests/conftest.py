import pytest

from edumetrics.models import ScoreRow
from edumetrics.sample_data import SAMPLE_KNOWLEDGE_MAP, load_sample_dataframe, load_sample_rows
from edumetrics.taxonomy import build_index


def make_rows(*score_lists, totals=None):
    rows = []
    for idx, scores in enumerate(score_lists):
        total = totals[idx] if totals is not None else None
        rows.append(ScoreRow.create(student_id=f"s{idx + 1}", name=f"Student {idx + 1}", scores=scores, total=total))
    return rows


@pytest.fixture()
def rows_factory():
    return make_rows


@pytest.fixture()
def index():
    return build_index()


@pytest.fixture()
def sample_df():
    return load_sample_dataframe()


@pytest.fixture()
def sample_rows():
    return load_sample_rows()


@pytest.fixture()
def sample_knowledge_map():
    return dict(SAMPLE_KNOWLEDGE_MAP)


@pytest.fixture()
def sample_csv_path(tmp_path):
    df = load_sample_dataframe()
    file_path = tmp_path / "sample.csv"
    df.to_csv(file_path, index=False)
    return file_path
