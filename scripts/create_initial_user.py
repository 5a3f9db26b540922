"""Utility script to create an initial user in the database."""

from __future__ import annotations

import argparse
from getpass import getpass

from sqlalchemy.exc import SQLAlchemyError

from crm_notifications.application.errors import ValidationError
from crm_notifications.application.use_cases.users import create_user
from crm_notifications.infrastructure.database import SessionLocal, initialize_database


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create a CRM user.")
    parser.add_argument("--name", default="Administrateur", help="Nom complet de l'utilisateur")
    parser.add_argument("--email", default="admin@example.com", help="Adresse email de connexion")
    parser.add_argument(
        "--password",
        default=None,
        help="Mot de passe. Demandé de façon interactive s'il est absent.",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()

    password = args.password or getpass("Mot de passe de l'utilisateur : ")
    if not password:
        raise SystemExit("Aucun mot de passe fourni.")

    initialize_database()

    session = SessionLocal()
    try:
        user = create_user(session, name=args.name, email=args.email, password=password)
    except ValidationError as exc:
        session.rollback()
        raise SystemExit(f"Impossible de créer l'utilisateur : {exc.message}") from exc
    except SQLAlchemyError as exc:
        session.rollback()
        raise SystemExit(f"Erreur lors de l'enregistrement : {exc}") from exc
    else:
        print(f"Utilisateur créé :\n  ID: {user.id}\n  Nom: {user.name}\n  Email: {user.email}")
    finally:
        session.close()


if __name__ == "__main__":
    main()
