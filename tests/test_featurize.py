"""Tests for observation vectors."""

import numpy as np
import pytest

from autopilot.featurize import featurize_session, ratio
from autopilot.schema import ObservationSpec, OBSERVATION_FEATURES
from flapsim.state import Body, Obstacle, Session


def test_layout_matches_feature_names():
    assert ObservationSpec.TOTAL_SIZE == len(OBSERVATION_FEATURES)


def test_no_target():
    obs = featurize_session(Session(body=Body(x=100, y=300, velocity=3)))
    assert obs[0] == pytest.approx(0.5)
    assert obs[1] == pytest.approx(0.2)
    assert np.all(obs[ObservationSpec.TARGET_START:] == 0)


def test_target_and_lookahead():
    session = Session(
        body=Body(x=100, y=300, velocity=0),
        obstacles=(
            Obstacle(x=0, gap_top=50, gap_bottom=220, passed=True),
            Obstacle(x=220, gap_top=120, gap_bottom=290),
            Obstacle(x=420, gap_top=180, gap_bottom=350),
        ),
    )
    obs = featurize_session(session)
    i = ObservationSpec.TARGET_START
    assert obs[i] == 1.0
    assert obs[i + 1] == pytest.approx(120 / 400)
    assert obs[i + 2] == pytest.approx(120 / 600)
    assert obs[i + 3] == pytest.approx(290 / 600)
    # body center 315 is below gap center 205
    assert obs[i + 4] == pytest.approx(110 / 600)
    assert obs[ObservationSpec.LOOKAHEAD_START] == pytest.approx(60 / 600)


def test_values_are_clamped():
    obs = featurize_session(Session(body=Body(x=100, y=300, velocity=99)))
    assert obs[1] == 1.0
    assert obs.min() >= -1.0 and obs.max() <= 1.0


def test_ratio_zero_denominator():
    assert ratio(5, 0) == 0.0
    assert ratio(-30, 10) == -1.0
