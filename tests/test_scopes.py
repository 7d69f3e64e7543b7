#!/usr/bin/env python3
"""
Unit tests for scoped bindings.
"""

import threading
import time
import unittest

from wirecore import (
    ComponentProvider,
    ContextConfig,
    DependencyNotFoundError,
    Id,
    IllegalComponentError,
    Scope,
    Singleton,
    scoped,
    singleton,
)


class AppComponent:
    pass


class Dependency:
    pass


class NotSingleton(AppComponent):
    pass


@singleton
class SingletonAnnotated(AppComponent):
    pass


class Pooled(Scope):
    """Hands out instances from a fixed size pool."""


class PooledProvider(ComponentProvider):
    MAX = 2

    def __init__(self, provider: ComponentProvider):
        self._provider = provider
        self._pool = []
        self._current = 0

    def produce(self, context):
        if len(self._pool) < self.MAX:
            self._pool.append(self._provider.produce(context))
        instance = self._pool[self._current % self.MAX]
        self._current += 1
        return instance

    def dependencies(self):
        return self._provider.dependencies()


@scoped(Pooled)
class PooledAnnotated(AppComponent):
    pass


class TestSingleton(unittest.TestCase):
    """Test the built-in singleton scope."""

    def setUp(self):
        self.config = ContextConfig()

    def test_unscoped_creates_new_instances(self):
        """Without a scope every get creates a new instance."""
        self.config.bind_type(AppComponent, NotSingleton)
        context = self.config.finalize()

        self.assertIsNot(context.get(AppComponent), context.get(AppComponent))

    def test_singleton_annotation(self):
        """Singleton passed at bind time, as a class or an instance."""
        for marker in (Singleton, Singleton()):
            with self.subTest(marker=marker):
                config = ContextConfig()
                config.bind_type(AppComponent, NotSingleton, marker)
                context = config.finalize()

                self.assertIs(context.get(AppComponent), context.get(AppComponent))

    def test_singleton_declared_on_class(self):
        """A scope declared on the implementation class is used as fallback."""
        self.config.bind_type(AppComponent, SingletonAnnotated)
        context = self.config.finalize()

        self.assertIs(context.get(AppComponent), context.get(AppComponent))

    def test_singleton_with_qualifiers_shares_instance(self):
        """All qualified identities of one scoped binding share its instance."""
        self.config.bind_type(AppComponent, NotSingleton, Singleton, Id("one"), Id("two"))
        context = self.config.finalize()

        self.assertIs(context.get(AppComponent, Id("one")), context.get(AppComponent, Id("two")))

    def test_independent_bindings_are_independent(self):
        """Two bindings of one class each keep their own singleton."""
        self.config.bind_type(AppComponent, NotSingleton, Singleton, Id("one"))
        self.config.bind_type(AppComponent, NotSingleton, Singleton, Id("two"))
        context = self.config.finalize()

        self.assertIsNot(context.get(AppComponent, Id("one")), context.get(AppComponent, Id("two")))

    def test_scoped_provider_keeps_dependencies(self):
        """Scoping does not hide dependencies from validation."""

        class NeedsDependency(AppComponent):
            def __init__(self, dependency: Dependency):
                self.dependency = dependency

        self.config.bind_type(AppComponent, NeedsDependency, Singleton)

        with self.assertRaises(DependencyNotFoundError):
            self.config.finalize()

    def test_failed_production_is_not_cached(self):
        """A singleton whose construction fails is retried on the next get."""
        attempts = []

        class Flaky(AppComponent):
            def __init__(self):
                attempts.append(1)
                if len(attempts) == 1:
                    raise RuntimeError("first attempt fails")

        self.config.bind_type(AppComponent, Flaky, Singleton)
        context = self.config.finalize()

        with self.assertRaises(RuntimeError):
            context.get(AppComponent)

        instance = context.get(AppComponent)
        self.assertIsInstance(instance, Flaky)
        self.assertIs(context.get(AppComponent), instance)
        self.assertEqual(len(attempts), 2)

    def test_concurrent_first_resolution_creates_one_instance(self):
        """Threads racing for a singleton all receive the same instance."""
        created = []

        class Slow(AppComponent):
            def __init__(self):
                time.sleep(0.01)
                created.append(self)

        self.config.bind_type(AppComponent, Slow, Singleton)
        context = self.config.finalize()
        results = []
        barrier = threading.Barrier(4)

        def resolve():
            barrier.wait(timeout=5)
            results.append(context.get(AppComponent))

        threads = [threading.Thread(target=resolve) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)

        self.assertEqual(len(created), 1)
        self.assertEqual(len(results), 4)
        self.assertTrue(all(result is created[0] for result in results))

    def test_concurrent_construction_is_not_reentrance(self):
        """Two threads building one unscoped component at once do not collide."""
        barrier = threading.Barrier(2)

        class Meeting(AppComponent):
            def __init__(self):
                barrier.wait(timeout=5)

        self.config.bind_type(AppComponent, Meeting)
        context = self.config.finalize()
        results = []
        errors = []

        def resolve():
            try:
                results.append(context.get(AppComponent))
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=resolve) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)

        self.assertEqual(errors, [])
        self.assertEqual(len(results), 2)
        self.assertIsNot(results[0], results[1])


class TestCustomScope(unittest.TestCase):
    """Test registering and using custom scopes."""

    def setUp(self):
        self.config = ContextConfig()
        self.config.register_scope(Pooled, PooledProvider)

    def test_custom_scope_annotation(self):
        """A registered scope decorates the provider of the binding."""
        self.config.bind_type(AppComponent, NotSingleton, Pooled())
        context = self.config.finalize()

        instances = {id(context.get(AppComponent)) for _ in range(4)}

        self.assertEqual(len(instances), PooledProvider.MAX)

    def test_custom_scope_declared_on_class(self):
        """A class-declared custom scope is honoured."""
        self.config.bind_type(AppComponent, PooledAnnotated)
        context = self.config.finalize()

        instances = {id(context.get(AppComponent)) for _ in range(4)}

        self.assertEqual(len(instances), PooledProvider.MAX)

    def test_explicit_scope_overrides_declared_scope(self):
        """A scope given at bind time wins over the one on the class."""
        self.config.bind_type(AppComponent, PooledAnnotated, Singleton)
        context = self.config.finalize()

        self.assertIs(context.get(AppComponent), context.get(AppComponent))

    def test_unregistered_scope(self):
        """Binding with a scope nobody registered is rejected."""

        class Unregistered(Scope):
            pass

        with self.assertRaises(IllegalComponentError):
            self.config.bind_type(AppComponent, NotSingleton, Unregistered)

    def test_unregistered_declared_scope(self):
        """The class-declared scope must be registered too."""
        with self.assertRaises(IllegalComponentError):
            ContextConfig().bind_type(AppComponent, PooledAnnotated)

    def test_multiple_scopes(self):
        """At most one scope per binding."""
        with self.assertRaises(IllegalComponentError):
            self.config.bind_type(AppComponent, NotSingleton, Singleton, Pooled)

    def test_register_non_scope(self):
        """Only Scope markers can be registered."""
        with self.assertRaises(IllegalComponentError):
            self.config.register_scope(Id("scope"), PooledProvider)

    def test_multiple_scopes_declared_on_class(self):
        """Declaring two scopes on one class is rejected."""
        with self.assertRaises(IllegalComponentError):

            @singleton
            @scoped(Pooled)
            class TwoScopes:
                pass

    def test_scoped_requires_scope_marker(self):
        """scoped() only accepts scope markers."""
        with self.assertRaises(IllegalComponentError):
            scoped(Id("not-a-scope"))

    def test_declared_scope_is_not_inherited(self):
        """Subclasses do not inherit the scope of their base class."""

        class PlainSubclass(SingletonAnnotated):
            pass

        self.config.bind_type(AppComponent, PlainSubclass)
        context = self.config.finalize()

        self.assertIsNot(context.get(AppComponent), context.get(AppComponent))


if __name__ == "__main__":
    unittest.main()
