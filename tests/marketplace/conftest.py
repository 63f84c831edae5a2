from datetime import timedelta

import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def marketplace_bed():
    from marketplace.domain import marketplace

    bed = DomainFixture(marketplace)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(marketplace_bed):
    from marketplace.config import get_settings

    get_settings.cache_clear()
    with marketplace_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()
    get_settings.cache_clear()


@pytest.fixture()
def make_product():
    """Factory adding a product through the admin command; returns its id."""
    from protean import current_domain

    from marketplace.catalogue.management import AddProduct

    def _make(name="Seer Fish", category="Fish", price=450.0, stock=10, **extra):
        return current_domain.process(
            AddProduct(name=name, category=category, price=price, stock=stock, **extra),
            asynchronous=False,
        )

    return _make


@pytest.fixture()
def delivery_date():
    """A date whose evening slot always satisfies the lead time."""
    from marketplace.utils.clock import local_now

    return local_now().date() + timedelta(days=1)
