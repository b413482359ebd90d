"""Tests for simulation-backed confusion and trial generation."""

import numpy as np
import pytest

from conftest import grayscale

from cvdlab.core.colorspace import delta_e
from cvdlab.core.exceptions import InvalidInput
from cvdlab.core.profiles import priority_colors
from cvdlab.core.types import CvdType, Response
from cvdlab.selection.stimulus import (
    SimulatedStimulusGenerator,
    TransformConfusionSimulator,
    validate_difficulty,
)


def boom(hex_color, cvd_type):
    raise AssertionError("transform must not be called for normal vision")


# ============================================================
# Confusion simulator
# ============================================================

class TestTransformConfusionSimulator:

    def setup_method(self):
        self.sim = TransformConfusionSimulator(grayscale)

    def test_normal_vision_only_confuses_identical(self):
        sim = TransformConfusionSimulator(boom)
        assert sim.simulated_confusion_probability("#ff0000", "FF0000", CvdType.NORMAL) == 1.0
        assert sim.simulated_confusion_probability("#FF0000", "#FE0000", "normal") == 0.0
        assert sim.simulate("abcdef", CvdType.NORMAL) == "#ABCDEF"

    def test_identical_simulation_is_certain_confusion(self):
        p = self.sim.simulated_confusion_probability("#FF0000", "#4C4C4C", CvdType.ACHROMATOPSIA)
        assert p == 1.0

    def test_decays_with_simulated_distance(self):
        near = self.sim.simulated_confusion_probability("#808080", "#858585", CvdType.ACHROMATOPSIA)
        far = self.sim.simulated_confusion_probability("#000000", "#FFFFFF", CvdType.ACHROMATOPSIA)
        assert near == pytest.approx(np.exp(-0.1 * delta_e("#808080", "#858585")))
        assert 0.0 <= far < 1e-6 < near < 1.0

    def test_symmetric(self):
        a, b = "#12AB34", "#9C0F77"
        for cvd in (CvdType.DEUTERANOPIA, CvdType.NORMAL):
            assert self.sim.simulated_confusion_probability(a, b, cvd) == \
                self.sim.simulated_confusion_probability(b, a, cvd)

    def test_malformed_color(self):
        with pytest.raises(InvalidInput):
            self.sim.simulated_confusion_probability("#GG0000", "#000000", CvdType.PROTANOPIA)


# ============================================================
# Stimulus generator
# ============================================================

class TestSimulatedStimulusGenerator:

    def setup_method(self):
        self.sim = TransformConfusionSimulator(grayscale)
        self.gen = SimulatedStimulusGenerator(self.sim, rng=np.random.default_rng(7))

    @pytest.mark.parametrize("cvd", [CvdType.ACHROMATOPSIA, CvdType.DEUTERANOMALY, CvdType.NORMAL])
    @pytest.mark.parametrize("difficulty", [1, 5, 10])
    def test_trial_shape(self, cvd, difficulty):
        for reference in ("#FF0000", "#000000", "#FFFFFF", "#3C7A11"):
            trial = self.gen.generate_trial(reference, cvd, difficulty)
            assert trial.color1 != trial.color2
            assert trial.reference == reference
            assert trial.difficulty == difficulty
            if trial.reference_position == Response.COLOR1:
                assert trial.color1 == reference
            else:
                assert trial.reference_position == Response.COLOR2
                assert trial.color2 == reference
            assert 0.0 <= trial.expected_confusion_prob <= 1.0

    def test_both_sides_used(self):
        positions = {
            self.gen.generate_trial("#808080", CvdType.ACHROMATOPSIA, 5).reference_position
            for _ in range(40)
        }
        assert positions == {Response.COLOR1, Response.COLOR2}

    def test_normal_vision_falls_back_to_nearby_color(self):
        trial = self.gen.generate_trial("#808080", CvdType.NORMAL, 5)
        assert trial.expected_confusion_prob == 0.0

    def test_confusable_color_constraints(self):
        found = self.gen.find_confusable_color("#808080", CvdType.ACHROMATOPSIA, 40.0, 15.0)
        assert found is not None
        assert delta_e(found, "#808080") > 10.0
        assert delta_e(grayscale(found, None), grayscale("#808080", None)) < 15.0

    def test_no_confusable_color_for_normal_vision(self):
        assert self.gen.find_confusable_color("#808080", CvdType.NORMAL) is None

    def test_deterministic_nudge_when_variants_collapse(self):
        gen = SimulatedStimulusGenerator(self.sim, rng=np.random.default_rng(0), max_attempts=0)
        trial = gen.generate_trial("#202020", CvdType.NORMAL, 5)
        assert {trial.color1, trial.color2} == {"#202020", "#482020"}

    def test_lowercase_reference_normalized(self):
        trial = self.gen.generate_trial("ff0000", CvdType.ACHROMATOPSIA, 5)
        assert trial.reference == "#FF0000"


class TestValidateDifficulty:

    @pytest.mark.parametrize("value", [1, 5, 10, np.int64(3)])
    def test_accepts(self, value):
        assert validate_difficulty(value) == int(value)

    @pytest.mark.parametrize("value", [0, 11, -3, "5", 5.0, False, None])
    def test_rejects(self, value):
        with pytest.raises(InvalidInput):
            validate_difficulty(value)


# ============================================================
# Confusion matrix and confusable sets
# ============================================================

class TestConfusableSets:

    def setup_method(self):
        self.sim = TransformConfusionSimulator(grayscale)
        self.gen = SimulatedStimulusGenerator(self.sim, rng=np.random.default_rng(21))

    def test_confusion_matrix(self):
        colors = ["#ff0000", "#4C4C4C", "#0000FF"]
        matrix = self.sim.confusion_matrix(colors, CvdType.ACHROMATOPSIA)

        assert list(matrix) == ["#FF0000", "#4C4C4C", "#0000FF"]
        for a in matrix:
            assert matrix[a][a] == 1.0
            for b in matrix:
                assert matrix[a][b] == matrix[b][a]
        assert matrix["#FF0000"]["#4C4C4C"] == 1.0
        assert matrix["#FF0000"]["#0000FF"] < 1.0

    def test_confusion_matrix_normal_vision(self):
        matrix = TransformConfusionSimulator(boom).confusion_matrix(
            ["#FF0000", "#00FF00"], "normal"
        )
        assert matrix == {
            "#FF0000": {"#FF0000": 1.0, "#00FF00": 0.0},
            "#00FF00": {"#FF0000": 0.0, "#00FF00": 1.0},
        }

    def test_multiple_confusable_colors(self):
        found = self.gen.find_multiple_confusable_colors("#808080", CvdType.ACHROMATOPSIA, 5)
        assert len(found) == 5
        assert len(set(found)) == 5
        for color in found:
            assert color != "#808080"
            assert delta_e(grayscale(color, None), "#808080") < 20.0

    def test_no_confusable_colors_for_normal_vision(self):
        assert self.gen.find_multiple_confusable_colors("#808080", CvdType.NORMAL) == []


# ============================================================
# Trial sets
# ============================================================

class TestTrialSets:

    def setup_method(self):
        self.gen = SimulatedStimulusGenerator(
            TransformConfusionSimulator(grayscale), rng=np.random.default_rng(4)
        )

    def test_batch_from_priority_colors(self):
        trials = self.gen.generate_trial_batch(CvdType.ACHROMATOPSIA, count=6, difficulty=3)
        assert len(trials) == 6
        allowed = set(priority_colors(CvdType.ACHROMATOPSIA))
        for trial in trials:
            assert trial.reference in allowed
            assert trial.difficulty == 3
            assert trial.color1 != trial.color2

    def test_batch_with_custom_provider(self):
        trials = self.gen.generate_trial_batch(
            "deuteranopia", count=3, priority_provider=lambda cvd: ["#ff0000"]
        )
        assert [t.reference for t in trials] == ["#FF0000"] * 3

    def test_batch_without_priority_colors(self):
        with pytest.raises(InvalidInput):
            self.gen.generate_trial_batch(CvdType.NORMAL, priority_provider=lambda cvd: [])

    def test_region_trials(self):
        trials = self.gen.generate_region_trials("#808080", count=4)
        assert [t.reference for t in trials] == ["#808080", "#6C8080", "#809480", "#806C80"]
        assert all(t.color1 != t.color2 for t in trials)

    def test_gradient_trials(self):
        trials = self.gen.generate_gradient_trials("#000000", "#FFFFFF", steps=4)
        assert [t.reference for t in trials] == [
            "#000000", "#404040", "#808080", "#BFBFBF", "#FFFFFF",
        ]
        assert all(t.difficulty == 7 for t in trials)

    @pytest.mark.parametrize("steps", [0, -1, 2.5, True])
    def test_gradient_rejects_bad_steps(self, steps):
        with pytest.raises(InvalidInput):
            self.gen.generate_gradient_trials("#000000", "#FFFFFF", steps=steps)

    def test_counts_validated(self):
        with pytest.raises(InvalidInput):
            self.gen.generate_trial_batch(CvdType.NORMAL, count=-1)
        with pytest.raises(InvalidInput):
            self.gen.generate_region_trials("#808080", count=1.5)
        assert self.gen.generate_region_trials("#808080", count=0) == []
