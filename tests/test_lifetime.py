import threading
import time
import unittest

from bindery import Container, Lifetime


class TestLifetimeControl(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container()

    def test_resolve_register_singleton_returns_same_instance(self):
        class A: ...

        calls = []
        self.cont.register(A, lambda: calls.append(1) or A(), Lifetime.SINGLETON)
        a1 = self.cont.resolve(A)
        a2 = self.cont.resolve(A)
        assert a2 is a1, "SINGLETON should return the cached instance"
        assert len(calls) == 1

    def test_resolve_register_transient_returns_new_instances(self):
        class A: ...

        calls = []
        self.cont.register(A, lambda: calls.append(1) or A(), Lifetime.TRANSIENT)
        a1 = self.cont.resolve(A)
        a2 = self.cont.resolve(A)
        assert a2 is not a1, "TRANSIENT should return new instances"
        assert len(calls) == 2

    def test_register_defaults_to_singleton(self):
        class A: ...

        self.cont.register(A, A)
        assert self.cont.resolve(A) is self.cont.resolve(A)

    def test_register_singleton_and_register_transient_shortcuts(self):
        class S: ...

        class T: ...

        self.cont.register_singleton(S, S).register_transient(T, T)
        assert self.cont.resolve(S) is self.cont.resolve(S)
        assert self.cont.resolve(T) is not self.cont.resolve(T)

    def test_register_instance_is_always_singleton(self):
        class A: ...

        inst = A()
        self.cont.register_instance(A, inst)
        a = self.cont.resolve(A)
        b = self.cont.resolve(A)
        assert a is inst
        assert b is inst

    def test_register_instance_is_visible_before_any_resolution(self):
        inst = object()
        self.cont.register_instance("thing", inst)
        assert self.cont.has("thing")
        assert self.cont.resolve("thing") is inst

    def test_singleton_resolved_to_none_is_cached(self):
        calls = []
        self.cont.register_singleton("nothing", lambda: calls.append(1))

        assert self.cont.resolve("nothing") is None
        assert self.cont.resolve("nothing") is None
        assert len(calls) == 1

    def test_singleton_resolved_to_falsy_value_is_cached(self):
        calls = []

        def zero():
            calls.append(1)
            return 0

        self.cont.register_singleton("zero", zero)
        assert self.cont.resolve("zero") == 0
        assert self.cont.resolve("zero") == 0
        assert len(calls) == 1

    def test_register_instance_of_none_never_calls_a_factory(self):
        self.cont.register_instance("none", None)
        assert self.cont.resolve("none") is None

    def test_reregistration_replaces_entry_and_keeps_handed_out_instances(self):
        class Service:
            def __init__(self, version):
                self.version = version

        self.cont.register_singleton(Service, lambda: Service(1))
        old = self.cont.resolve(Service)

        self.cont.register_singleton(Service, lambda: Service(2))
        new = self.cont.resolve(Service)

        assert old.version == 1
        assert new.version == 2
        assert new is not old

    def test_failing_singleton_factory_caches_nothing(self):
        attempts = []

        def flaky():
            attempts.append(1)
            if len(attempts) == 1:
                raise ValueError("boom")
            return "ok"

        self.cont.register_singleton("flaky", flaky)

        with self.assertRaises(ValueError):
            self.cont.resolve("flaky")

        assert self.cont.resolve("flaky") == "ok"
        assert len(attempts) == 2

    def test_singleton_resolved_from_many_threads_is_built_once(self):
        calls = []
        barrier = threading.Barrier(8)

        def slow():
            calls.append(1)
            time.sleep(0.05)
            return object()

        self.cont.register_singleton("slow", slow)

        results = []

        def worker():
            barrier.wait()
            results.append(self.cont.resolve("slow"))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)

        assert len(calls) == 1
        assert len(results) == 8
        assert all(r is results[0] for r in results)
