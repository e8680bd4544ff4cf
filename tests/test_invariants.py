from edumetrics import invariants


def _result(results, name):
    return next(res for res in results if res["name"] == name)


def test_run_invariants_pass(sample_df):
    results = invariants.run_invariants(sample_df)
    assert all(res["ok"] for res in results)


def test_run_invariants_flags_missing_ids(sample_df):
    bad = sample_df.copy()
    bad.loc[0, "学号"] = ""
    missing_row = _result(invariants.run_invariants(bad), "missing_identifiers")
    assert missing_row["ok"] is False
    assert missing_row["detail"] == 1


def test_run_invariants_flags_duplicate_ids(sample_df):
    bad = sample_df.copy()
    bad.loc[1, "学号"] = "S01"
    assert _result(invariants.run_invariants(bad), "duplicate_student_ids")["detail"] == 1


def test_run_invariants_flags_bad_scores(sample_df):
    bad = sample_df.astype(object)
    bad.loc[0, "题1"] = "abc"
    bad.loc[1, "题2"] = 5
    bad.loc[2, "题3"] = -1
    results = invariants.run_invariants(bad)
    assert _result(results, "non_numeric_scores")["detail"] == 1
    assert _result(results, "score_range_violations")["detail"] == 2
    assert _result(results, "total_mismatches")["detail"] == 3


def test_run_invariants_flags_missing_columns(sample_df):
    narrow = sample_df[["学号", "姓名"]]
    required = _result(invariants.run_invariants(narrow), "required_columns")
    assert required["ok"] is False
    assert "总分" in required["detail"]
