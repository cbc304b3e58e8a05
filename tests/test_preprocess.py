import numpy as np
import pandas as pd
import pytest

from eligibility_engine import settings
from eligibility_engine.preprocess import (
    RAW_COLUMNS,
    TARGET_COLUMN,
    encode_employment,
    encode_marital,
    engineer,
    engineer_features,
    fit_scaler,
    generate_synthetic_data,
    heuristic_approval_score,
    split_data,
)
from eligibility_engine.schemas import ApplicantProfile, FEATURE_NAMES


# ---------------------------------------------------------------- encoders

@pytest.mark.parametrize("value, expected", [
    ("salaried", 0.8), ("self_employed", 0.5), ("business", 0.6), ("freelance", 0.5),
])
def test_encode_employment(value, expected):
    assert encode_employment(value) == expected


@pytest.mark.parametrize("value, expected", [
    ("married", 0.7), ("single", 0.5), ("divorced", 0.4), ("widowed", 0.45), ("", 0.5),
])
def test_encode_marital(value, expected):
    assert encode_marital(value) == expected


# ---------------------------------------------------------------- features

def test_engineer_derived_formulas(weak_applicant):
    f = engineer(weak_applicant)

    assert f.loan_to_income_ratio == pytest.approx(4_000_000 / 150_001)
    assert f.loan_to_income_ratio == pytest.approx(26.67, abs=0.01)
    assert f.monthly_burden == pytest.approx(4_000_000 * 0.01 / 360)
    assert f.income_per_dependent == pytest.approx(150_000 / 5)
    assert f.credit_x_income == pytest.approx(0.1 * 150_000)
    assert f.risk_score == pytest.approx((4_000_000 / 150_001) * 0.9 * 5)
    assert f.employment_encoded == 0.5
    assert f.marital_encoded == 0.5


def test_engineer_zero_income_and_dependents_do_not_divide_by_zero():
    profile = ApplicantProfile(
        income=0, credit_history=0.0, loan_amount=500_000, loan_term=12,
        employment_type="business", dependents=0, marital_status="widowed",
    )
    f = engineer(profile)

    assert f.loan_to_income_ratio == 500_000
    assert f.income_per_dependent == 0
    assert f.risk_score == 500_000


def test_feature_vector_has_twelve_named_features(strong_applicant):
    f = engineer(strong_applicant)
    assert len(FEATURE_NAMES) == 12
    assert list(f.to_dict()) == list(FEATURE_NAMES)
    np.testing.assert_allclose(f.to_array(), [f.to_dict()[n] for n in FEATURE_NAMES])


def test_batch_and_single_engineering_agree():
    df = generate_synthetic_data(50, random_state=7)
    batch = engineer_features(df)

    assert list(batch.columns) == list(FEATURE_NAMES)
    for i, row in enumerate(df[RAW_COLUMNS].itertuples(index=False)):
        single = engineer(ApplicantProfile(*row))
        np.testing.assert_allclose(batch.iloc[i].to_numpy(), single.to_array())


def test_engineer_features_unknown_category_falls_back():
    df = pd.DataFrame([{
        "income": 100.0, "credit_history": 0.5, "loan_amount": 10.0, "loan_term": 12,
        "employment_type": "contractor", "dependents": 0, "marital_status": "unknown",
    }])
    features = engineer_features(df)
    assert features.loc[0, "employment_encoded"] == 0.5
    assert features.loc[0, "marital_encoded"] == 0.5


# ---------------------------------------------------------------- generator

def test_generator_ranges_and_columns():
    df = generate_synthetic_data(2000, random_state=1)

    assert len(df) == 2000
    assert list(df.columns) == RAW_COLUMNS + [TARGET_COLUMN]
    assert df["income"].between(200_000, 2_000_000).all()
    assert df["credit_history"].between(0, 1).all()
    assert df["loan_amount"].between(100_000, 5_000_000).all()
    assert df["loan_term"].between(12, 359).all()
    assert df["dependents"].between(0, 4).all()
    assert set(df["employment_type"]) <= set(settings.EMPLOYMENT_TYPES)
    assert set(df["marital_status"]) <= set(settings.MARITAL_STATUSES)
    assert set(df[TARGET_COLUMN].unique()) == {0, 1}


def test_generator_labels_follow_heuristic_within_noise():
    df = generate_synthetic_data(2000, random_state=3)
    score = heuristic_approval_score(
        df["income"], df["credit_history"], df["loan_amount"],
        df["employment_type"], df["dependents"],
    )
    approved = df[TARGET_COLUMN].to_numpy() == 1

    # noise is at most +/-0.05 around the 0.55 cut-off
    assert (score[approved] > settings.LABEL_THRESHOLD - settings.LABEL_NOISE).all()
    assert (score[~approved] <= settings.LABEL_THRESHOLD + settings.LABEL_NOISE).all()


def test_generator_seeded_is_reproducible():
    pd.testing.assert_frame_equal(
        generate_synthetic_data(100, random_state=5),
        generate_synthetic_data(100, random_state=5),
    )


def test_generator_rejects_negative_count():
    with pytest.raises(ValueError):
        generate_synthetic_data(-1)


# ---------------------------------------------------------------- split

def test_split_keeps_generation_order():
    df = generate_synthetic_data(5000, random_state=11)
    train_df, validation_df = split_data(df)

    assert len(train_df) == 4000
    assert len(validation_df) == 1000
    pd.testing.assert_frame_equal(train_df, df.iloc[:4000])
    pd.testing.assert_frame_equal(validation_df, df.iloc[4000:])


@pytest.mark.parametrize("fraction", [0, 1, 1.5, -0.2])
def test_split_rejects_bad_fraction(fraction):
    with pytest.raises(ValueError):
        split_data(generate_synthetic_data(10, random_state=0), fraction)


# ---------------------------------------------------------------- scaler

def test_fit_scaler_uses_population_statistics():
    features = engineer_features(generate_synthetic_data(300, random_state=2))
    scaling = fit_scaler(features)

    np.testing.assert_allclose(scaling.means, features.mean().to_numpy())
    np.testing.assert_allclose(scaling.stds, features.std(ddof=0).to_numpy())
    assert scaling.feature_names == FEATURE_NAMES

    normalized = scaling.apply(features)
    np.testing.assert_allclose(normalized.mean(axis=0), 0, atol=1e-9)
    np.testing.assert_allclose(normalized.std(axis=0), 1, atol=1e-9)


def test_fit_scaler_zero_spread_scales_by_one():
    df = generate_synthetic_data(20, random_state=4)
    df["dependents"] = 2
    features = engineer_features(df)
    params = fit_scaler(features).as_dict()

    mean, std = params["dependents"]
    assert mean == pytest.approx(2.0)
    assert std == 1.0


def test_scaling_applies_to_single_vector(strong_applicant):
    features = engineer_features(generate_synthetic_data(100, random_state=6))
    scaling = fit_scaler(features)
    vector = engineer(strong_applicant)

    expected = (vector.to_array() - scaling.means) / scaling.stds
    np.testing.assert_allclose(scaling.apply(vector), expected)


def test_scaling_parameters_are_read_only():
    scaling = fit_scaler(engineer_features(generate_synthetic_data(10, random_state=0)))
    with pytest.raises(ValueError):
        scaling.means[0] = 1.0
