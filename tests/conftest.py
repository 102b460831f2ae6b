"""Shared fixtures for querying tests."""

from __future__ import annotations

import pytest

from cqrs_ddd_querying import (
    FilterCompiler,
    InMemoryMemoCache,
    PropertyPathResolver,
    QueryEngine,
    build_default_registry,
)

from .models import Product, make_products


@pytest.fixture
def registry():
    """Default operator handler registry."""
    return build_default_registry()


@pytest.fixture
def cache():
    return InMemoryMemoCache()


@pytest.fixture
def resolver(cache):
    return PropertyPathResolver(cache=cache)


@pytest.fixture
def compiler(registry, resolver, cache):
    return FilterCompiler(registry=registry, resolver=resolver, cache=cache)


@pytest.fixture
def engine(registry, resolver, cache):
    """A fresh engine per test so caches never leak between tests."""
    return QueryEngine(registry=registry, resolver=resolver, cache=cache)


@pytest.fixture
def products() -> list[Product]:
    return make_products()
