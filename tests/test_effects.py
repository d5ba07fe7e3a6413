"""Tests for use_effect: mark-and-sweep mount and unmount."""

from sliceflux import ManualScheduler, Phase, create_store


class _Effect:
    """Records setup and cleanup calls."""

    def __init__(self):
        self.setups = 0
        self.cleanups = 0

    def __call__(self):
        self.setups += 1
        return self.cleanup

    def cleanup(self):
        self.cleanups += 1


def make_store():
    scheduler = ManualScheduler()
    return create_store(scheduler=scheduler), scheduler


class TestMountUnmount:
    def test_setup_once_cleanup_once(self):
        store, _ = make_store()
        effect = _Effect()
        declare = [True, True, True, False]
        cycle = iter(declare)
        store.subscribe(lambda s: store.use_effect("c", effect) if next(cycle) else None)

        for _ in declare:
            store.refresh()
        assert effect.setups == 1
        assert effect.cleanups == 1

    def test_cleanup_runs_in_first_undeclared_cycle(self):
        store, _ = make_store()
        effect = _Effect()
        wanted = {"on": True}
        store.subscribe(lambda s: store.use_effect("c", effect) if wanted["on"] else None)

        store.refresh()
        assert "c" in store._effects
        wanted["on"] = False
        store.refresh()
        assert effect.cleanups == 1
        assert "c" not in store._effects
        store.refresh()
        assert effect.cleanups == 1

    def test_remount_after_unmount(self):
        store, _ = make_store()
        effect = _Effect()
        declare = iter([True, False, True])
        store.subscribe(lambda s: store.use_effect("c", effect) if next(declare) else None)
        store.refresh()
        store.refresh()
        store.refresh()
        assert effect.setups == 2
        assert effect.cleanups == 1

    def test_effect_without_cleanup(self):
        store, _ = make_store()
        calls = []
        declare = iter([True, False])
        store.subscribe(
            lambda s: store.use_effect("log", lambda: calls.append("setup")) if next(declare) else None
        )
        store.refresh()
        store.refresh()
        assert calls == ["setup"]

    def test_independent_names(self):
        store, _ = make_store()
        a, b = _Effect(), _Effect()
        show_b = iter([True, False])

        def render(state):
            store.use_effect("a", a)
            if next(show_b):
                store.use_effect("b", b)

        store.subscribe(render)
        store.refresh()
        store.refresh()
        assert (a.setups, a.cleanups) == (1, 0)
        assert (b.setups, b.cleanups) == (1, 1)

    def test_sweep_runs_before_callbacks(self):
        store, scheduler = make_store()
        order = []
        _, dispatch = store.use_reducer("show", lambda a, s: a, True)

        def render(state):
            if state["show"]:
                store.use_effect("e", lambda: lambda: order.append("cleanup"))

        store.subscribe(render)
        store.refresh()
        dispatch(False, callback=lambda v: order.append("callback"))
        scheduler.run_pending()
        assert order == ["cleanup", "callback"]


class TestOutsideNotification:
    def test_outside_subscription_is_ignored(self, caplog):
        store, _ = make_store()
        effect = _Effect()
        with caplog.at_level("WARNING", logger="sliceflux.store"):
            store.use_effect("c", effect)
        assert effect.setups == 0
        assert "called outside of a subscription" in caplog.text

    def test_from_callback_is_ignored(self):
        store, scheduler = make_store()
        effect = _Effect()
        _, dispatch = store.use_reducer("n", lambda a, n: n + a, 0)
        phases = []

        def callback(value):
            phases.append(store.phase)
            store.use_effect("c", effect)

        dispatch(1, callback=callback)
        scheduler.run_pending()
        assert phases == [Phase.DRAINING_CALLBACKS]
        assert effect.setups == 0


class TestDelay:
    def test_setup_waits_for_next_refresh(self):
        store, scheduler = make_store()
        effect = _Effect()
        store.subscribe(lambda s: store.use_effect("d", effect, delay=True))
        store.refresh()
        assert effect.setups == 0
        assert not store._effects.is_mounted("d")
        assert store.refresh_scheduled

        scheduler.run_pending()
        assert effect.setups == 1
        assert store._effects.is_mounted("d")

    def test_setup_runs_after_next_refresh_renders(self):
        store, scheduler = make_store()
        order = []
        _, dispatch = store.use_reducer("n", lambda a, n: n + a, 0)

        def render(state):
            order.append("render")
            store.use_effect("d", lambda: order.append("setup"), delay=True)

        store.subscribe(render)
        dispatch(1, callback=lambda v: order.append("callback"))
        scheduler.run_pending()
        assert order == ["render", "callback"]
        scheduler.run_pending()
        assert order == ["render", "callback", "render", "setup"]

    def test_delayed_effect_mounts_once(self):
        store, _ = make_store()
        effect = _Effect()
        store.subscribe(lambda s: store.use_effect("d", effect, delay=True))
        store.refresh()
        store.refresh()
        store.refresh()
        assert effect.setups == 1
        assert store._effects.is_mounted("d")

    def test_delayed_effect_unmounts(self):
        store, _ = make_store()
        effect = _Effect()
        declare = iter([True, True, False])
        store.subscribe(lambda s: store.use_effect("d", effect, delay=True) if next(declare) else None)
        store.refresh()
        store.refresh()
        store.refresh()
        assert (effect.setups, effect.cleanups) == (1, 1)

    def test_setup_skipped_when_undeclared_before_it_runs(self):
        store, scheduler = make_store()
        effect = _Effect()
        wanted = {"on": True}
        store.subscribe(lambda s: store.use_effect("d", effect, delay=True) if wanted["on"] else None)
        store.refresh()
        wanted["on"] = False
        store.refresh()
        scheduler.run_until_idle()
        assert (effect.setups, effect.cleanups) == (0, 0)
        assert "d" not in store._effects

    def test_setup_skipped_after_dispose(self):
        store, scheduler = make_store()
        effect = _Effect()
        store.subscribe(lambda s: store.use_effect("d", effect, delay=True))
        store.refresh()
        store.dispose()
        scheduler.run_until_idle()
        assert (effect.setups, effect.cleanups) == (0, 0)


class TestFaults:
    def test_failing_setup_is_isolated(self):
        store, _ = make_store()
        good = _Effect()

        def bad():
            raise RuntimeError("setup failed")

        def render(state):
            store.use_effect("bad", bad)
            store.use_effect("good", good)

        store.subscribe(render)
        store.refresh()
        store.refresh()
        assert good.setups == 1

    def test_failing_cleanup_is_isolated(self):
        store, _ = make_store()
        good = _Effect()
        declare = iter([True, False])

        def bad_cleanup():
            raise RuntimeError("cleanup failed")

        def render(state):
            if next(declare):
                store.use_effect("bad", lambda: bad_cleanup)
                store.use_effect("good", good)

        store.subscribe(render)
        store.refresh()
        store.refresh()
        assert good.cleanups == 1
        assert len(store._effects) == 0
