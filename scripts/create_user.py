#!/usr/bin/env python3
from __future__ import annotations

from getpass import getpass

from socialsphere.auth.users import register_user
from socialsphere.config import load_settings
from socialsphere.errors import DuplicateUser
from socialsphere.infra.document_store import DocumentStore


def main() -> None:
    settings = load_settings()
    store = DocumentStore(settings.db_path)

    username = input("Username: ").strip()
    name = input("Name: ").strip()
    email = input("Email: ").strip()
    age_in = input("Age: ").strip()
    if not age_in.isdigit():
        raise SystemExit("Age must be a whole number")

    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")
    if pw1 != pw2:
        raise SystemExit("Passwords do not match")

    try:
        user = register_user(store, username=username, name=name, email=email, age=int(age_in), password=pw1)
    except DuplicateUser as exc:
        raise SystemExit(exc.message)
    print(f"OK -> {user.email} ({user.id}) in {settings.db_path}")


if __name__ == "__main__":
    main()
