from __future__ import annotations

import pytest

from punch_bridge.core.enums import BatchPolicy, IgnoreReason, IntentKind
from punch_bridge.core.exceptions import ValidationError
from punch_bridge.sessions.factory import BatchStrategyFactory
from punch_bridge.sessions.model import AttendanceSession, Intent
from punch_bridge.sessions.strategies.strict_strategy import StrictBatchStrategy
from punch_bridge.sessions.strategies.synthesizing_strategy import SynthesizingBatchStrategy

EMP = 7


def test_factory_strict_with_lookup():
    strategy = BatchStrategyFactory(BatchPolicy.STRICT).for_batch(lookup_available=True)
    assert isinstance(strategy, StrictBatchStrategy)
    assert strategy.needs_lookup


def test_factory_falls_back_when_lookup_missing(caplog):
    strategy = BatchStrategyFactory(BatchPolicy.STRICT).for_batch(lookup_available=False)
    assert isinstance(strategy, SynthesizingBatchStrategy)
    assert "synthesizing" in caplog.text


def test_factory_synthesize_policy_is_honoured():
    strategy = BatchStrategyFactory(BatchPolicy.SYNTHESIZE).for_batch(lookup_available=True)
    assert isinstance(strategy, SynthesizingBatchStrategy)
    assert not strategy.needs_lookup


def test_strict_single_punch_is_checkin_only(reconciler, at):
    intents = StrictBatchStrategy().decide(reconciler, employee_id=EMP, first=at(10, 9), last=at(10, 9), last_session=None)
    assert intents == [Intent.create(EMP, at(10, 9))]


def test_strict_pair_without_session_writes_one_closed_session(reconciler, at):
    intents = StrictBatchStrategy().decide(
        reconciler, employee_id=EMP, first=at(10, 9), last=at(10, 17), last_session=None
    )
    assert intents == [Intent.create_and_close(EMP, at(10, 9), at(10, 17))]


def test_strict_pair_against_open_session(reconciler, at):
    open_session = AttendanceSession(session_id=3, employee_id=EMP, check_in=at(10, 8))
    intents = StrictBatchStrategy().decide(
        reconciler, employee_id=EMP, first=at(10, 9), last=at(10, 17), last_session=open_session
    )
    # first closes the open session, last starts a new one
    assert [i.kind for i in intents] == [IntentKind.CLOSE, IntentKind.CREATE]
    assert intents[0].session_id == 3
    assert intents[1].check_in == at(10, 17)


def test_strict_pair_with_backdated_first(reconciler, at):
    closed = AttendanceSession(session_id=3, employee_id=EMP, check_in=at(10, 8), check_out=at(10, 9, 30))
    intents = StrictBatchStrategy().decide(
        reconciler, employee_id=EMP, first=at(10, 9), last=at(10, 17), last_session=closed
    )
    assert intents[0].reason == IgnoreReason.BACKDATED
    assert intents[1] == Intent.create(EMP, at(10, 17))


def test_synthesizing_covers_first_to_last(reconciler, at):
    intents = SynthesizingBatchStrategy().decide(
        reconciler, employee_id=EMP, first=at(10, 9), last=at(10, 17), last_session=None
    )
    assert intents == [Intent.create_and_close(EMP, at(10, 9), at(10, 17))]


def test_synthesizing_single_punch(reconciler, at):
    intents = SynthesizingBatchStrategy().decide(
        reconciler, employee_id=EMP, first=at(10, 9), last=at(10, 9), last_session=None
    )
    assert intents == [Intent.create(EMP, at(10, 9))]


def test_synthesizing_ignores_other_days(reconciler, at):
    intents = SynthesizingBatchStrategy().decide(
        reconciler, employee_id=EMP, first=at(9, 9), last=at(9, 17), last_session=None
    )
    assert intents[0].reason == IgnoreReason.NON_TODAY


def test_session_rejects_checkout_before_checkin(at):
    with pytest.raises(ValidationError):
        AttendanceSession(session_id=1, employee_id=EMP, check_in=at(10, 9), check_out=at(10, 9))
