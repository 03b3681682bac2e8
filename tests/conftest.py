"""Shared pytest fixtures for diforge tests."""

import pytest
from fixtures import StubResolver

from diforge.container import Container
from diforge.dispatch import DispatchResolver
from diforge.strategy import SubclassingInstantiationStrategy
from diforge.synthesis.synthesizer import SubclassSynthesizer


@pytest.fixture()
def container() -> Container:
    """Container with the default subclassing strategy."""
    return Container()


@pytest.fixture()
def stub_resolver() -> StubResolver:
    """Resolver stub standing in for a container."""
    return StubResolver()


@pytest.fixture()
def dispatch_resolver() -> DispatchResolver:
    return DispatchResolver()


@pytest.fixture()
def synthesizer() -> SubclassSynthesizer:
    return SubclassSynthesizer()


@pytest.fixture()
def strategy() -> SubclassingInstantiationStrategy:
    return SubclassingInstantiationStrategy()
