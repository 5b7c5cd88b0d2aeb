# daybook/create_user.py
# one-off account setup: there is no sign-up endpoint
import argparse
import getpass
import sys

from dotenv import load_dotenv
from sqlalchemy.exc import IntegrityError

import daybook.models  # noqa: F401
from daybook.db.database import Base, SessionLocal, engine
from daybook.services.sessions import create_user

load_dotenv()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create a daybook login")
    parser.add_argument("user_name")
    parser.add_argument("--password", help="prompted for when omitted")
    args = parser.parse_args(argv)

    password = args.password or getpass.getpass("password: ")
    if not password:
        print("password must not be empty", file=sys.stderr)
        return 1

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        user = create_user(db, args.user_name, password)
    except IntegrityError:
        db.rollback()
        print(f"user {args.user_name!r} already exists", file=sys.stderr)
        return 1
    finally:
        db.close()

    print(f"created user id={user.id} name={user.user_name}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
