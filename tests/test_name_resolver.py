"""Tests for inventory/name_resolver.py: caching, fallback and coalescing of concurrent lookups."""

import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from inventory.context import RunContext
from inventory.exceptions import CollectionCancelled
from inventory.name_resolver import NameResolver


# ---------------------------------------------------------------------------
# Caching and fallback
# ---------------------------------------------------------------------------
class TestResolution:
    def test_resolves_known_and_falls_back_to_identifier(self, run_ctx):
        resolver = NameResolver({"vpc": lambda ctx, region: {"vpc-1": "main"}})
        assert resolver.resolve_name(run_ctx, "vpc", "r1", "vpc-1") == "main"
        assert resolver.resolve_name(run_ctx, "vpc", "r1", "vpc-9") == "vpc-9"

    def test_empty_identifier_returns_empty_without_lookup(self, run_ctx):
        resolver = NameResolver({"vpc": lambda ctx, region: {"": "never"}})
        assert resolver.resolve_name(run_ctx, "vpc", "r1", None) == ""
        assert resolver.resolve_name(run_ctx, "vpc", "r1", "") == ""
        assert resolver.call_count("vpc", "r1") == 0

    def test_resolve_names(self, run_ctx):
        resolver = NameResolver({"sg": lambda ctx, region: {"sg-1": "web"}})
        assert resolver.resolve_names(run_ctx, "sg", "r1", ["sg-1", None, "sg-2"]) == ["web", "sg-2"]
        assert resolver.resolve_names(run_ctx, "sg", "r1", None) == []

    def test_loader_runs_once_per_kind_and_region(self, run_ctx):
        calls = []

        def loader(ctx, region):
            calls.append(region)
            return {"id": f"name-{region}"}

        resolver = NameResolver({"vpc": loader})
        for _ in range(3):
            assert resolver.resolve_name(run_ctx, "vpc", "r1", "id") == "name-r1"
        assert resolver.resolve_name(run_ctx, "vpc", "r2", "id") == "name-r2"
        assert calls == ["r1", "r2"]
        assert resolver.call_count("vpc", "r1") == 1

    def test_failing_loader_cached_as_empty(self, run_ctx):
        calls = []

        def loader(ctx, region):
            calls.append(region)
            raise RuntimeError("AccessDenied")

        resolver = NameResolver({"kms": loader})
        assert resolver.resolve_name(run_ctx, "kms", "r1", "key-1") == "key-1"
        assert resolver.resolve_name(run_ctx, "kms", "r1", "key-2") == "key-2"
        assert calls == ["r1"]
        assert resolver.error("kms", "r1") == "AccessDenied"

    def test_unknown_kind_degrades_to_identifier(self, run_ctx):
        resolver = NameResolver()
        assert resolver.resolve_name(run_ctx, "nothing", "r1", "x") == "x"
        assert "nothing" in resolver.error("nothing", "r1")

    def test_kinds(self):
        resolver = NameResolver({"vpc": lambda ctx, region: {}})
        resolver.register_loader("kms", lambda ctx, region: {})
        assert resolver.kinds() == ["kms", "vpc"]

    def test_get_all_is_read_only(self, run_ctx):
        resolver = NameResolver({"vpc": lambda ctx, region: {"a": "b"}})
        mapping = resolver.get_all(run_ctx, "vpc", "r1")
        with pytest.raises(TypeError):
            mapping["c"] = "d"


# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------
class TestCoalescing:
    def test_concurrent_cold_lookups_issue_one_call(self):
        ctx = RunContext()
        calls = []
        lock = threading.Lock()
        start = threading.Barrier(8)

        def loader(ctx, region):
            with lock:
                calls.append(region)
            time.sleep(0.2)
            return {"key-1": "alias/app"}

        resolver = NameResolver({"kms": loader})

        def lookup(_):
            start.wait()
            return resolver.resolve_name(ctx, "kms", "r1", "key-1")

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(lookup, range(8)))

        assert results == ["alias/app"] * 8
        assert calls == ["r1"]
        assert resolver.call_count("kms", "r1") == 1

    def test_cancelled_loader_evicts_entry(self):
        ctx = RunContext()

        def loader(ctx, region):
            ctx.cancel("stop")
            ctx.check()

        resolver = NameResolver({"vpc": loader})
        with pytest.raises(CollectionCancelled):
            resolver.get_all(ctx, "vpc", "r1")

        fresh = RunContext()
        resolver.register_loader("vpc", lambda ctx, region: {"a": "b"})
        assert resolver.get_all(fresh, "vpc", "r1") == {"a": "b"}
        assert resolver.call_count("vpc", "r1") == 2

    def test_waiter_observes_cancellation(self):
        ctx = RunContext()
        release = threading.Event()
        started = threading.Event()

        def loader(ctx, region):
            started.set()
            release.wait(5)
            return {}

        resolver = NameResolver({"vpc": loader})
        with ThreadPoolExecutor(max_workers=2) as executor:
            owner = executor.submit(resolver.get_all, ctx, "vpc", "r1")
            assert started.wait(5)
            waiter = executor.submit(resolver.get_all, ctx, "vpc", "r1")
            ctx.cancel("test")
            with pytest.raises(CollectionCancelled):
                waiter.result(timeout=5)
            release.set()
            owner.result(timeout=5)
