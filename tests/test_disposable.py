"""Tests for Disposable and CompositeDisposable."""

import pytest

from mapped_disposable import (
    CompositeDisposable,
    Disposable,
    DisposableLike,
    InvalidValueError,
    MappedDisposable,
    dispose_all,
    is_disposable,
)


class _Foreign:
    """Disposable-like object that does not inherit from anything here."""

    def __init__(self):
        self.calls = 0

    def dispose(self):
        self.calls += 1


class TestIsDisposable:
    def test_accepts_library_types(self):
        assert is_disposable(Disposable())
        assert is_disposable(CompositeDisposable())
        assert is_disposable(MappedDisposable())

    def test_accepts_foreign_objects(self):
        assert is_disposable(_Foreign())
        assert isinstance(_Foreign(), DisposableLike)

    def test_rejects_values_without_dispose(self):
        assert not is_disposable({})
        assert not is_disposable("foo")
        assert not is_disposable(None)

    def test_rejects_non_callable_dispose(self):
        class Odd:
            dispose = True

        assert not is_disposable(Odd())

    def test_rejects_classes(self):
        assert not is_disposable(Disposable)


class TestDisposable:
    def test_starts_active(self):
        assert Disposable().disposed is False

    def test_runs_action_once(self):
        calls = []
        d = Disposable(lambda: calls.append(1))
        d.dispose()
        d.dispose()
        assert calls == [1]
        assert d.disposed

    def test_without_action(self):
        d = Disposable()
        d.dispose()
        assert d.disposed

    def test_action_error_propagates_and_is_not_retried(self):
        calls = []

        def boom():
            calls.append(1)
            raise RuntimeError("boom")

        d = Disposable(boom)
        with pytest.raises(RuntimeError):
            d.dispose()
        assert d.disposed
        d.dispose()
        assert calls == [1]

    def test_context_manager(self):
        with Disposable() as d:
            assert not d.disposed
        assert d.disposed


class TestCompositeDisposable:
    def test_construct_with_members(self):
        a, b = Disposable(), Disposable()
        cd = CompositeDisposable(a, b)
        assert cd.disposables == (a, b)
        assert len(cd) == 2
        assert a in cd

    def test_dispose_cascades_and_empties(self):
        a, b = Disposable(), Disposable()
        cd = CompositeDisposable(a, b)
        cd.dispose()
        assert cd.disposed
        assert a.disposed and b.disposed
        assert len(cd.disposables) == 0

    def test_dispose_idempotent(self):
        foreign = _Foreign()
        cd = CompositeDisposable(foreign)
        cd.dispose()
        cd.dispose()
        assert foreign.calls == 1

    def test_remove_does_not_dispose(self):
        a = Disposable()
        cd = CompositeDisposable(a)
        cd.remove(a)
        assert a not in cd
        cd.dispose()
        assert not a.disposed

    def test_remove_unknown_is_noop(self):
        cd = CompositeDisposable()
        cd.remove(Disposable())
        cd.delete(Disposable())
        assert len(cd) == 0

    def test_clear_does_not_dispose(self):
        a = Disposable()
        cd = CompositeDisposable(a)
        cd.clear()
        assert len(cd) == 0
        assert not a.disposed

    def test_add_rejects_non_disposable_atomically(self):
        a = Disposable()
        cd = CompositeDisposable()
        with pytest.raises(InvalidValueError, match=r"Value must have a \.dispose\(\) method"):
            cd.add(a, object())
        assert len(cd) == 0

    def test_invalid_value_error_is_type_error(self):
        with pytest.raises(TypeError):
            CompositeDisposable({})

    def test_add_after_dispose_disposes_immediately(self):
        cd = CompositeDisposable()
        cd.dispose()
        late = Disposable()
        cd.add(late)
        assert late.disposed
        assert late not in cd

    def test_nested_composites(self):
        leaf = Disposable()
        inner = CompositeDisposable(leaf)
        outer = CompositeDisposable(inner)
        outer.dispose()
        assert inner.disposed
        assert leaf.disposed

    def test_shared_member_disposed_once(self):
        calls = []
        shared = Disposable(lambda: calls.append(1))
        first = CompositeDisposable(shared)
        second = CompositeDisposable(shared)
        first.dispose()
        second.dispose()
        assert calls == [1]

    def test_iteration_snapshot(self):
        a, b = Disposable(), Disposable()
        cd = CompositeDisposable(a, b)
        for member in cd:
            cd.remove(member)
        assert len(cd) == 0

    def test_unhashable_members(self):
        class Unhashable(_Foreign):
            __hash__ = None

        a, b = Unhashable(), Unhashable()
        cd = CompositeDisposable(a, b)
        assert a in cd
        cd.remove(a)
        cd.dispose()
        assert a.calls == 0
        assert b.calls == 1

    def test_equal_members_are_distinct(self):
        class Equal(_Foreign):
            def __eq__(self, other):
                return isinstance(other, Equal)

            __hash__ = object.__hash__

        a, b = Equal(), Equal()
        cd = CompositeDisposable(a, b)
        assert len(cd) == 2
        cd.dispose()
        assert a.calls == 1
        assert b.calls == 1

    def test_failing_member_does_not_stop_others(self):
        def boom():
            raise RuntimeError("boom")

        before, after = Disposable(), Disposable()
        cd = CompositeDisposable(before, Disposable(boom), after)
        with pytest.raises(RuntimeError, match="boom"):
            cd.dispose()
        assert before.disposed
        assert after.disposed
        assert len(cd) == 0


class TestDisposeAll:
    def test_reraises_first_error(self):
        def fail(message):
            def action():
                raise RuntimeError(message)

            return action

        last = Disposable()
        with pytest.raises(RuntimeError, match="first"):
            dispose_all([Disposable(fail("first")), Disposable(fail("second")), last])
        assert last.disposed

    def test_empty(self):
        dispose_all([])
