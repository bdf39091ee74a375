"""Unit tests for workload states and results."""

from deployctl.core.errors import ErrorDetails
from deployctl.models.workload import StateKind, WorkloadResult, WorkloadState


class TestWorkloadState:
    """Tests for WorkloadState."""

    def test_labels(self) -> None:
        """Labels name the subject of the state."""
        assert WorkloadState.fetching_remote_tree("Demo").label == "Fetching repository Demo"
        assert WorkloadState.downloading("Core").label == "Downloading Core"
        assert WorkloadState.installing("Core").label == "Installing Core"
        assert WorkloadState.removing_outdated("Core").label == "Removing outdated Core"
        assert WorkloadState.removing("Core").label == "Removing Core"
        assert WorkloadState.aborted().label == "Aborted by user"
        assert WorkloadState.done().label == "Completed"

    def test_terminal_states(self) -> None:
        """Only interrupted, aborted and done end a run."""
        details = ErrorDetails(name="transport", message="offline")
        assert WorkloadState.interrupted(details).is_terminal
        assert WorkloadState.aborted().is_terminal
        assert WorkloadState.done().is_terminal
        assert not WorkloadState.installing("Core").is_terminal

    def test_interrupted_carries_details(self) -> None:
        """The interrupted state keeps the error details."""
        details = ErrorDetails(name="transport", message="offline")
        state = WorkloadState.interrupted(details)
        assert state.kind is StateKind.INTERRUPTED
        assert state.error == details
        assert state.to_dict()["error"] == {"name": "transport", "message": "offline"}

    def test_to_dict_omits_empty_fields(self) -> None:
        """States without subject or error serialize compactly."""
        assert WorkloadState.done().to_dict() == {"kind": "completed", "label": "Completed"}


class TestWorkloadResult:
    """Tests for WorkloadResult."""

    def test_success(self) -> None:
        result = WorkloadResult.success()
        assert result.ok
        assert result.error is None
        assert result.to_dict() == {"ok": True}

    def test_failure(self) -> None:
        details = ErrorDetails(name="archive", message="bad zip")
        result = WorkloadResult.failure(details)
        assert not result.ok
        assert result.to_dict() == {"ok": False, "error": details.to_dict()}
