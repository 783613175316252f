from datetime import datetime, timedelta, timezone

import pytest

from netdiag.helpers import (
    CheckClient,
    add_failure_log_entry,
    add_success_log_entry,
    append_log_entry,
    set_condition,
    update_status,
)
from netdiag.model import (
    REACHABLE,
    ConditionStatus,
    ConflictError,
    LogEntry,
    LogEntryReason,
    NotFoundError,
    PodNetworkConnectivityCheck,
    PodNetworkConnectivityCheckCondition,
    PodNetworkConnectivityCheckStatus,
)


def _time(sec):
    return datetime(2000, 1, 1, 0, 0, sec, tzinfo=timezone.utc)


def entry(sec, message="msg"):
    return LogEntry(
        start=_time(sec),
        success=True,
        reason=LogEntryReason.TCP_CONNECT,
        message=message,
        latency=timedelta(milliseconds=1),
    )


@pytest.mark.parametrize(
    "conditions, condition, expected",
    [
        (
            [],
            PodNetworkConnectivityCheckCondition(
                type=REACHABLE, status=ConditionStatus.TRUE, reason="A", message="Msg"
            ),
            [
                PodNetworkConnectivityCheckCondition(
                    type=REACHABLE, status=ConditionStatus.TRUE, reason="A", message="Msg"
                )
            ],
        ),
        (
            [
                PodNetworkConnectivityCheckCondition(
                    type=REACHABLE, status=ConditionStatus.TRUE, reason="A", message="Msg"
                )
            ],
            PodNetworkConnectivityCheckCondition(
                type=REACHABLE, status=ConditionStatus.FALSE, reason="B", message="MsgB"
            ),
            [
                PodNetworkConnectivityCheckCondition(
                    type=REACHABLE, status=ConditionStatus.FALSE, reason="B", message="MsgB"
                )
            ],
        ),
    ],
)
def test_set_condition(conditions, condition, expected):
    check = PodNetworkConnectivityCheck(
        status=PodNetworkConnectivityCheckStatus(conditions=conditions)
    )
    set_condition(check.status.conditions, condition)
    for cond in check.status.conditions:
        assert cond.last_transition_time is not None
        cond.last_transition_time = None
    assert check.status.conditions == expected


def test_set_condition_same_status_keeps_transition_time():
    before = _time(1)
    conditions = [
        PodNetworkConnectivityCheckCondition(
            type=REACHABLE, status=ConditionStatus.TRUE, reason="A", last_transition_time=before
        )
    ]
    set_condition(
        conditions,
        PodNetworkConnectivityCheckCondition(
            type=REACHABLE, status=ConditionStatus.TRUE, reason="B", message="MsgB"
        ),
    )
    assert conditions[0].last_transition_time == before
    assert conditions[0].reason == "B"
    assert conditions[0].message == "MsgB"


def test_append_log_entry_sorts_descending():
    log = [entry(2), entry(0)]
    result = append_log_entry(log, entry(1), entry(3))
    assert [e.start for e in result] == [_time(3), _time(2), _time(1), _time(0)]


def test_append_log_entry_is_stable_for_equal_times():
    result = append_log_entry([entry(1, "old")], entry(1, "new"))
    assert [e.message for e in result] == ["new", "old"]


def test_append_log_entry_limits_length():
    log = [entry(i) for i in range(10, 0, -1)]
    result = append_log_entry(log, entry(20))
    assert len(result) == 10
    assert result[0].start == _time(20)
    assert result[-1].start == _time(2)


def test_add_success_and_failure_entries():
    status = PodNetworkConnectivityCheckStatus()
    add_success_log_entry(entry(1))(status)
    add_failure_log_entry(entry(2))(status)
    assert status.successes == [entry(1)]
    assert status.failures == [entry(2)]


def test_update_status_writes_changes():
    client = CheckClient([PodNetworkConnectivityCheck(name="c")])
    status, updated = update_status(client, "c", add_success_log_entry(entry(1)))
    assert updated is True
    assert status.successes == [entry(1)]
    assert client.get("c").status.successes == [entry(1)]


def test_update_status_no_change():
    client = CheckClient([PodNetworkConnectivityCheck(name="c")])
    status, updated = update_status(client, "c")
    assert updated is False
    assert status == PodNetworkConnectivityCheckStatus()


def test_update_status_missing_check():
    with pytest.raises(NotFoundError):
        update_status(CheckClient(), "missing", add_success_log_entry(entry(1)))


def test_client_rejects_stale_update():
    client = CheckClient([PodNetworkConnectivityCheck(name="c")])
    stale = client.get("c")
    fresh = client.get("c")
    fresh.status.successes.append(entry(1))
    client.update_status(fresh)
    stale.status.failures.append(entry(2))
    with pytest.raises(ConflictError):
        client.update_status(stale)
    assert client.get("c").status.failures == []