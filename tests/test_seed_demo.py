from __future__ import annotations

from sqlmodel import Session, SQLModel, create_engine, select

from mis_canchas.enums import UserRole
from mis_canchas.models import Court, Establishment, User
from scripts.seed_demo import DEMO_COURTS, seed_demo


def test_seed_creates_establishment_courts_and_users() -> None:
    engine = create_engine("sqlite://")
    SQLModel.metadata.create_all(engine)

    with Session(engine) as session:
        result = seed_demo(session)

        assert result.created is True
        establishment = session.get(Establishment, result.establishment_id)
        assert establishment.owner_id == result.admin_id
        courts = session.exec(
            select(Court).where(Court.establishment_id == establishment.id)
        ).all()
        assert len(courts) == len(DEMO_COURTS)
        staff = session.get(User, result.staff_id)
        assert staff.role == UserRole.staff
        assert staff.establishment_id == establishment.id


def test_seed_is_idempotent() -> None:
    engine = create_engine("sqlite://")
    SQLModel.metadata.create_all(engine)

    with Session(engine) as session:
        first = seed_demo(session)
        second = seed_demo(session)

        assert second.created is False
        assert second.establishment_id == first.establishment_id
        assert len(session.exec(select(Establishment)).all()) == 1
        assert len(session.exec(select(User)).all()) == 3
