from __future__ import annotations

import pytest

from punch_bridge.core.enums import IgnoreReason, IntentKind
from punch_bridge.sessions.model import AttendanceSession, Intent

EMP = 7


def test_no_prior_session_creates(reconciler, at):
    intent = reconciler.reconcile(EMP, at(10, 9), None)
    assert intent == Intent.create(EMP, at(10, 9))


def test_open_session_later_punch_closes(reconciler, at):
    open_session = AttendanceSession(session_id=11, employee_id=EMP, check_in=at(10, 9))
    intent = reconciler.reconcile(EMP, at(10, 17, 30), open_session)
    assert intent.kind == IntentKind.CLOSE
    assert intent.session_id == 11
    assert intent.check_out == at(10, 17, 30)


def test_open_session_exact_repeat_is_duplicate_checkin(reconciler, at):
    open_session = AttendanceSession(session_id=11, employee_id=EMP, check_in=at(10, 9))
    intent = reconciler.reconcile(EMP, at(10, 9), open_session)
    assert intent == Intent.ignore(EMP, IgnoreReason.DUPLICATE_CHECKIN)


def test_open_session_earlier_punch_is_backdated(reconciler, at, caplog):
    open_session = AttendanceSession(session_id=11, employee_id=EMP, check_in=at(10, 9))
    intent = reconciler.reconcile(EMP, at(10, 8), open_session)
    assert intent.reason == IgnoreReason.BACKDATED
    assert "Backdated punch" in caplog.text


def test_closed_session_later_punch_starts_second_session(reconciler, at):
    closed = AttendanceSession(session_id=11, employee_id=EMP, check_in=at(10, 9), check_out=at(10, 17, 30))
    intent = reconciler.reconcile(EMP, at(10, 18), closed)
    assert intent == Intent.create(EMP, at(10, 18))


def test_closed_session_same_instant_is_duplicate_checkout(reconciler, at):
    closed = AttendanceSession(session_id=11, employee_id=EMP, check_in=at(10, 9), check_out=at(10, 17, 30))
    intent = reconciler.reconcile(EMP, at(10, 17, 30), closed)
    assert intent.reason == IgnoreReason.DUPLICATE_CHECKOUT


def test_closed_session_earlier_punch_is_backdated(reconciler, at):
    closed = AttendanceSession(session_id=11, employee_id=EMP, check_in=at(10, 9), check_out=at(10, 17, 30))
    intent = reconciler.reconcile(EMP, at(10, 8), closed)
    assert intent.reason == IgnoreReason.BACKDATED


def test_non_today_ignored_whatever_the_session(reconciler, at):
    open_session = AttendanceSession(session_id=11, employee_id=EMP, check_in=at(10, 9))
    closed = AttendanceSession(session_id=12, employee_id=EMP, check_in=at(10, 9), check_out=at(10, 10))
    for session in (None, open_session, closed):
        assert reconciler.reconcile(EMP, at(11, 9), session).reason == IgnoreReason.NON_TODAY


def test_explicit_today_overrides_clock(reconciler, at):
    intent = reconciler.reconcile(EMP, at(9, 9), None, today="2025-03-09")
    assert intent.kind == IntentKind.CREATE


def test_apply_projects_close(reconciler, at):
    open_session = AttendanceSession(session_id=11, employee_id=EMP, check_in=at(10, 9))
    after = reconciler.apply(Intent.close(EMP, 11, at(10, 17)), open_session)
    assert after.session_id == 11
    assert after.check_out == at(10, 17)


def test_apply_close_without_open_session_fails(reconciler, at):
    with pytest.raises(ValueError):
        reconciler.apply(Intent.close(EMP, 11, at(10, 17)), None)


def test_at_most_one_open_session_for_any_sequence(reconciler, at):
    instants = [at(10, 9), at(10, 9), at(10, 12), at(10, 8), at(10, 13), at(10, 13), at(10, 17), at(10, 18)]
    session = None
    for instant in instants:
        intent = reconciler.reconcile(EMP, instant, session)
        if intent.kind == IntentKind.CREATE:
            assert session is None or not session.is_open
        session = reconciler.apply(intent, session)

    # 09:00-12:00, 13:00-17:00, 18:00-open
    assert session.check_in == at(10, 18)
    assert session.is_open
