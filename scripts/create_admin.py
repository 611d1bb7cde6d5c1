import getpass
import os

from dotenv import load_dotenv

from aquapulse.core.config import Settings
from aquapulse.core.container import build_container
from aquapulse.core.logging import configure_logging
from aquapulse.domain.errors import AuthError


def main() -> None:
    load_dotenv()
    configure_logging()

    email = os.getenv("ADMIN_EMAIL") or input("Administrator email: ").strip()
    password = os.getenv("ADMIN_PASSWORD") or getpass.getpass("Administrator password: ").strip()

    if not email or not password:
        raise RuntimeError("Set ADMIN_EMAIL and ADMIN_PASSWORD in the environment or provide them interactively.")

    settings = Settings()
    container = build_container(settings)
    try:
        admin = container.auth_service.ensure_default_admin(email, password)
    except AuthError as exc:
        raise SystemExit(exc.message) from None
    if admin is None:
        print("Email already belongs to a customer or supplier account; no administrator created.")
        return
    print(f"Administrator ready: {admin.email} (id {admin.id}) in {settings.database_path}")


if __name__ == "__main__":
    main()
