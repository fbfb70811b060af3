from common.core.exceptions import BatchSchedulingError, PartialSendError


class TestBatchErrors:
    def test_partial_failure_message(self):
        error = PartialSendError(2, 5)

        assert str(error) == "2 of 5 meter events failed (partial failure)"
        assert error.is_total_failure is False

    def test_total_failure_message(self):
        error = BatchSchedulingError(3, 3)

        assert str(error) == "3 of 3 subscription item triggers failed (total failure)"
        assert error.is_total_failure is True
