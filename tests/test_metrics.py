"""Tests for TrainingMetrics."""

import pytest

from image_training.training.metrics import TrainingMetrics


class TestTrainingMetrics:
    def test_preallocated_with_zeros(self) -> None:
        metrics = TrainingMetrics(3)
        assert metrics.val_acc == [0.0, 0.0, 0.0]
        assert metrics.val_loss == [0.0, 0.0, 0.0]

    def test_record_is_one_based(self) -> None:
        metrics = TrainingMetrics(2)
        metrics.record(2, 0.75, 0.3)
        assert metrics.val_acc == [0.0, 0.75]
        assert metrics.val_loss == [0.0, 0.3]

    @pytest.mark.parametrize("epoch", [0, 3])
    def test_record_out_of_range(self, epoch: int) -> None:
        with pytest.raises(IndexError):
            TrainingMetrics(2).record(epoch, 0.5, 0.5)

    def test_best_epoch_last_tie_wins(self) -> None:
        metrics = TrainingMetrics(4)
        for epoch, acc in enumerate([0.5, 0.8, 0.8, 0.6], start=1):
            metrics.record(epoch, acc, 0.0)
        assert metrics.best_epoch() == 3

    def test_non_positive_epochs_rejected(self) -> None:
        with pytest.raises(ValueError):
            TrainingMetrics(0)

    def test_as_dict_copies(self) -> None:
        metrics = TrainingMetrics(1)
        d = metrics.as_dict()
        d["val_acc"][0] = 1.0
        assert metrics.val_acc == [0.0]
