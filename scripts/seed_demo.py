from __future__ import annotations

import argparse
import os
import sys
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path

from dotenv import load_dotenv
from sqlmodel import Session, SQLModel, create_engine, select

# Permite ejecutar el script directamente desde scripts/.
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from mis_canchas.enums import UserRole
from mis_canchas.models import Court, Establishment, User
from mis_canchas.utils.auth import create_access_token
from mis_canchas.utils.db import database_url

DEMO_SLUG = "complejo-demo"

DEMO_COURTS = [
    ("Cancha 1", "futbol5", Decimal("9000.00"), "sintetico", False),
    ("Cancha 2", "futbol5", Decimal("9000.00"), "sintetico", True),
    ("Padel A", "padel", Decimal("12000.00"), "cemento", True),
]


@dataclass
class SeedResult:
    establishment_id: int
    admin_id: int
    staff_id: int
    player_id: int
    created: bool


def _get_or_create_user(
    session: Session,
    email: str,
    name: str,
    role: UserRole,
    establishment_id: int | None = None,
) -> User:
    user = session.exec(select(User).where(User.email == email)).first()
    if user:
        return user
    user = User(email=email, name=name, role=role, establishment_id=establishment_id)
    session.add(user)
    session.flush()
    return user


def seed_demo(session: Session) -> SeedResult:
    """Crea un establecimiento de prueba con canchas y usuarios. Idempotente."""
    establishment = session.exec(
        select(Establishment).where(Establishment.slug == DEMO_SLUG)
    ).first()
    created = establishment is None

    admin = _get_or_create_user(session, "admin@demo.test", "Admin Demo", UserRole.admin)
    if establishment is None:
        establishment = Establishment(
            name="Complejo Demo",
            slug=DEMO_SLUG,
            city="Cordoba",
            address="Calle Falsa 123",
            owner_id=admin.id,
        )
        session.add(establishment)
        session.flush()
        for name, sport, price, surface, covered in DEMO_COURTS:
            session.add(
                Court(
                    establishment_id=establishment.id,
                    name=name,
                    sport=sport,
                    price_per_hour=price,
                    surface=surface,
                    covered=covered,
                )
            )
    admin.establishment_id = establishment.id
    session.add(admin)

    staff = _get_or_create_user(
        session, "caja@demo.test", "Caja Demo", UserRole.staff, establishment.id
    )
    player = _get_or_create_user(session, "jugador@demo.test", "Jugador Demo", UserRole.player)
    session.commit()
    return SeedResult(
        establishment_id=establishment.id,
        admin_id=admin.id,
        staff_id=staff.id,
        player_id=player.id,
        created=created,
    )


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Carga un establecimiento de demostracion con canchas y usuarios."
    )
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Crea las tablas con SQLModel (solo desarrollo; en produccion usar alembic).",
    )
    parser.add_argument(
        "--print-tokens",
        action="store_true",
        help="Imprime tokens JWT de los usuarios demo (requiere AUTH_SECRET_KEY).",
    )
    args = parser.parse_args()

    load_dotenv(".env")
    engine = create_engine(database_url(async_driver=False))
    if args.create_tables:
        SQLModel.metadata.create_all(engine)

    with Session(engine) as session:
        result = seed_demo(session)

    status = "creado" if result.created else "ya existia"
    print(f"Establecimiento demo {status}: id={result.establishment_id}")
    if args.print_tokens:
        if not os.getenv("AUTH_SECRET_KEY"):
            print("ERROR: falta AUTH_SECRET_KEY para firmar tokens.", file=sys.stderr)
            return 2
        for label, user_id, role in (
            ("admin", result.admin_id, UserRole.admin),
            ("staff", result.staff_id, UserRole.staff),
            ("player", result.player_id, UserRole.player),
        ):
            print(f"{label}: {create_access_token(user_id, role=role.value)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
