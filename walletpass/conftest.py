import pytest
from django.core.cache import cache

from walletpass.member_dashboard.catalog import ProgramType
from walletpass.member_dashboard.session import ConfiguratorSession
from walletpass.member_dashboard.tests.factories import TemplateDescriptorFactory, UserFactory


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def user(db):
    return UserFactory()


@pytest.fixture
def loyalty_template():
    return TemplateDescriptorFactory(
        name="Bean There Coffee",
        capabilities=frozenset({"points", "tiers"}),
        allowed_program_types=frozenset({ProgramType.loyalty}),
    )


@pytest.fixture
def loyalty_session(loyalty_template) -> ConfiguratorSession:
    session = ConfiguratorSession()
    session.initialize_draft_spec(loyalty_template, ProgramType.loyalty)
    return session
