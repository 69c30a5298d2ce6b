import requests

from dashboard.api_client import ApiError
from dashboard.optimistic import RecordingNotifier, attempt


class _Box:
    def __init__(self, value):
        self.value = value

    def get(self):
        return self.value

    def set(self, value):
        self.value = value


def test_success_keeps_new_state():
    box, notes = _Box(("kg",)), RecordingNotifier()
    result = attempt(box.get, box.set, ("kg", "g"), lambda: {"ok": 1}, notes, "Saved")
    assert result.ok and result.data == {"ok": 1}
    assert box.value == ("kg", "g")
    assert notes.messages == [("success", "Saved")]


def test_state_is_applied_before_request():
    box, seen = _Box("old"), []
    attempt(box.get, box.set, "new", lambda: seen.append(box.value), RecordingNotifier())
    assert seen == ["new"]


def test_api_error_reverts_and_reports_server_message():
    box, notes = _Box(("kg",)), RecordingNotifier()

    def fail():
        raise ApiError(409, "Unit already exists")

    result = attempt(box.get, box.set, ("kg", "g"), fail, notes, "Saved", "Failed to update units")
    assert not result
    assert box.value == ("kg",)
    assert notes.of_kind("error") == ["Unit already exists"]
    assert notes.of_kind("success") == []


def test_transport_failure_uses_fallback_message():
    box, notes = _Box(1), RecordingNotifier()

    def offline():
        raise ApiError(0, "Something went wrong. Please try again.")

    attempt(box.get, box.set, 2, offline, notes, failure_message="Failed to save")
    assert box.value == 1
    assert notes.of_kind("error") == ["Failed to save"]


def test_raw_requests_error_also_reverts():
    box, notes = _Box("a"), RecordingNotifier()

    def boom():
        raise requests.Timeout("slow")

    result = attempt(box.get, box.set, "b", boom, notes, failure_message="Timed out")
    assert box.value == "a"
    assert result.error.status == 0
    assert notes.of_kind("error") == ["Timed out"]
