from datetime import datetime, timedelta, timezone
from pathlib import Path
import sys

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import models  # noqa: E402,F401  (registers the task table)


# Fixed offset west of UTC so local and UTC calendar days differ in the evening.
LOCAL_TZ = timezone(timedelta(hours=-5))


@pytest.fixture()
def tz():
    return LOCAL_TZ


@pytest.fixture()
def now():
    # Monday afternoon
    return datetime(2025, 3, 10, 14, 30, tzinfo=LOCAL_TZ)


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)

    def factory():
        return Session(engine, expire_on_commit=False)

    return factory
