import pytest
import sqlalchemy as sa

from app import create_app
from config import Config
from extensions import db
from migrations import MigrationRunner


@pytest.fixture
def app(tmp_path):
    class TestConfig(Config):
        TESTING = True
        SQLALCHEMY_DATABASE_URI = "sqlite:///" + str(tmp_path / "tickets.db")
        EXCEL_OUTPUT_PATH = str(tmp_path / "exports" / "payments.xlsx")
        PAYMENT_MERCHANT_ID = "M-TEST"
        CORS_ORIGIN = "http://localhost:5173"

    app = create_app(TestConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def engine(tmp_path):
    engine = sa.create_engine("sqlite:///" + str(tmp_path / "migrations.db"))
    yield engine
    engine.dispose()


@pytest.fixture
def runner(engine):
    return MigrationRunner(engine)
