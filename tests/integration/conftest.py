import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from aikya.adapters.postgres.models import Base
from aikya.adapters.postgres.session import get_db
from aikya.dependencies import get_envelope_codec
from aikya.domain.integrations.codec import EnvelopeCodec
from aikya.main import app

TEST_MASTER_KEY = "00" * 32


@pytest.fixture
def test_engine():
    # Use in-memory SQLite shared across threads for store and API tests
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(test_engine):
    Session = sessionmaker(bind=test_engine)
    session = Session()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def codec():
    return EnvelopeCodec(TEST_MASTER_KEY)


@pytest.fixture
def api(db_session, codec):
    """FastAPI app wired to the SQLite session and a test master key."""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_envelope_codec] = lambda: codec
    yield app
    app.dependency_overrides = {}
