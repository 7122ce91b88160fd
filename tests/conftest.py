"""
Pytest configuration and shared fixtures for dispatch tests.
"""
import pytest
from test_utils import create_test_broker, create_test_session, create_latency_table


@pytest.fixture
def cheap_far_broker():
    """Cheaper broker (effective price 0.2) that is far from the client."""
    return create_test_broker("B", price_per_minute=1.0, servers=((0.8, 4),))


@pytest.fixture
def pricey_near_broker():
    """Pricier broker (effective price 0.25) that is close to the client."""
    return create_test_broker("A", price_per_minute=2.0, servers=((0.5, 4),))


@pytest.fixture
def two_site_latencies(pricey_near_broker, cheap_far_broker):
    return create_latency_table({pricey_near_broker: 40, cheap_far_broker: 200})


@pytest.fixture
def eu_session():
    return create_test_session("s1", "S", tags=("eu",))


@pytest.fixture
def overloaded_db_broker():
    """Broker whose only DB VM runs above the overload threshold."""
    return create_test_broker("hot", price_per_minute=0.01, db_utils=((0.9, 0.1, 0.1),))
