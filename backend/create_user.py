"""
create_user.py — Create (or re-password) an account in the local users table
and print an access token for it. Only meaningful with AUTH_BACKEND=local.

    python create_user.py alice@example.com "a long password"
"""
import argparse

from database import SessionLocal, init_db
from errors import ConflictError
from identity import LocalIdentityProvider


def main(argv=None):
    parser = argparse.ArgumentParser(description="Create a local account")
    parser.add_argument("email")
    parser.add_argument("password")
    args = parser.parse_args(argv)

    init_db()
    provider = LocalIdentityProvider(SessionLocal)

    try:
        user_id = provider.create_user(args.email, args.password)
        print(f"Created user {user_id} <{args.email}>")
    except ConflictError:
        user_id = provider.find_user_id_by_email(args.email)
        provider.update_password(user_id, args.password)
        print(f"Updated password for {user_id} <{args.email}>")

    print(provider.create_token(user_id, args.email.strip().lower()))


if __name__ == "__main__":
    main()
