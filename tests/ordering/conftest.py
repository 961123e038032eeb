import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def ordering_bed():
    from food_ordering.domain import ordering
    from food_ordering.utils.db import drop_db, setup_db

    bed = DomainFixture(ordering)
    bed.setup()
    setup_db(ordering)
    yield bed
    drop_db(ordering)
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield

        # Clear all databases
        for _, provider in current_domain.providers.items():
            provider._data_reset()

        # Drain event store
        current_domain.event_store.store._data_reset()


@pytest.fixture(autouse=True)
def _catalog():
    """Run every test without a menu catalog unless it installs one."""
    from food_ordering.catalog import reset_catalog

    reset_catalog()
    yield
    reset_catalog()
