import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ["TESTING"] = "true"

import uuid
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient
from app.core.config import settings
from app.core.constants import RoleEnum
from app.core.database import Base, get_db
from app.models.institute import Institute
from app.models.user import User
from app.models.video import Video
from app.models.zone import Zone
import main

test_db_url = settings.TEST_DATABASE_URL or "sqlite:///./test.db"

@pytest.fixture(scope="session")
def database_engine():
    if test_db_url.startswith("sqlite"):
        engine = create_engine(test_db_url, connect_args={"check_same_thread": False})
    else:
        engine = create_engine(test_db_url)
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    if test_db_url.startswith("sqlite") and os.path.exists("./test.db"):
        os.remove("./test.db")

@pytest.fixture(scope="function")
def db_session(database_engine):
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=database_engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        # Services commit, so every table is emptied between tests.
        for table in reversed(Base.metadata.sorted_tables):
            db.execute(table.delete())
        db.commit()
        db.close()

@pytest.fixture(scope="function")
def client(db_session):
    app = main.create_app()
    app.dependency_overrides[get_db] = lambda: db_session
    with TestClient(app) as test_client:
        yield test_client

@pytest.fixture
def caches(client):
    return client.app.state.caches

@pytest.fixture
def zone_factory(db_session):
    def _zone_factory(name=None, status="active"):
        zone = Zone(name=name or f"Zone-{uuid.uuid4().hex[:8]}", status=status)
        db_session.add(zone)
        db_session.commit()
        db_session.refresh(zone)
        return zone
    return _zone_factory

@pytest.fixture
def institute_factory(db_session, zone_factory):
    def _institute_factory(zone=None, name=None, status="active", **kwargs):
        zone = zone or zone_factory()
        institute = Institute(
            name=name or f"Institute-{uuid.uuid4().hex[:8]}",
            code=kwargs.pop("code", f"INS-{uuid.uuid4().hex[:6].upper()}"),
            zone_id=zone.id,
            status=status,
            **kwargs
        )
        db_session.add(institute)
        db_session.commit()
        db_session.refresh(institute)
        return institute
    return _institute_factory

@pytest.fixture
def user_factory(db_session):
    def _user_factory(role=RoleEnum.STUDENT, institute=None, zone=None, parent=None, status="active", **kwargs):
        role = RoleEnum(role).value
        user = User(
            first_name=kwargs.pop("first_name", role.replace("_", " ").title()),
            last_name=kwargs.pop("last_name", "Tester"),
            email=kwargs.pop("email", f"{role}-{uuid.uuid4().hex}@abacus-test.com"),
            role=role,
            status=status,
            institute_id=institute.id if institute else None,
            zone_id=zone.id if zone else (institute.zone_id if institute else None),
            parent_id=parent.id if parent else None,
            **kwargs
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _user_factory

@pytest.fixture
def video_factory(db_session):
    def _video_factory(institute=None, category="addition", status="active", **kwargs):
        video = Video(
            youtube_video_id=kwargs.pop("youtube_video_id", uuid.uuid4().hex[:11]),
            title=kwargs.pop("title", f"Video {uuid.uuid4().hex[:6]}"),
            category=category,
            status=status,
            institute_id=institute.id if institute else None,
            difficulty_level=kwargs.pop("difficulty_level", "beginner"),
            course_order=kwargs.pop("course_order", 0),
            **kwargs
        )
        db_session.add(video)
        db_session.commit()
        db_session.refresh(video)
        return video
    return _video_factory

@pytest.fixture
def tenancy(zone_factory, institute_factory, user_factory, video_factory):
    """Two zones, three institutes and one account per role.

    zone_a holds institute_a1 and institute_a2, zone_b holds institute_b.
    """
    zone_a = zone_factory(name="Zone A")
    zone_b = zone_factory(name="Zone B")
    institute_a1 = institute_factory(zone=zone_a, name="Alpha One")
    institute_a2 = institute_factory(zone=zone_a, name="Alpha Two")
    institute_b = institute_factory(zone=zone_b, name="Bravo")

    super_admin = user_factory(RoleEnum.SUPER_ADMIN)
    zone_manager = user_factory(RoleEnum.ZONE_MANAGER, zone=zone_a)
    institute_admin = user_factory(RoleEnum.INSTITUTE_ADMIN, institute=institute_a1)
    parent = user_factory(RoleEnum.PARENT, institute=institute_a1)
    student = user_factory(RoleEnum.STUDENT, institute=institute_a1, parent=parent)
    other_student = user_factory(RoleEnum.STUDENT, institute=institute_a2)
    outside_student = user_factory(RoleEnum.STUDENT, institute=institute_b)

    videos = {
        "a1_active": video_factory(institute=institute_a1, category="addition"),
        "a1_inactive": video_factory(institute=institute_a1, category="subtraction", status="inactive"),
        "b_active": video_factory(institute=institute_b, category="multiplication"),
        "library": video_factory(institute=None, category="division"),
    }

    return {
        "zones": {"a": zone_a, "b": zone_b},
        "institutes": {"a1": institute_a1, "a2": institute_a2, "b": institute_b},
        "users": {
            "super_admin": super_admin,
            "zone_manager": zone_manager,
            "institute_admin": institute_admin,
            "parent": parent,
            "student": student,
            "other_student": other_student,
            "outside_student": outside_student,
        },
        "videos": videos,
    }
