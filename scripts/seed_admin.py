"""Seed an administrator user."""

import os

from app import create_app
from models import db
from models.profile import Profile
from models.user import ROLE_ADMIN, User

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@example.com")
ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "AdminPass123")


def main() -> None:
    app = create_app()
    with app.app_context():
        admin = User.query.filter_by(email=ADMIN_EMAIL).first()
        if admin is None:
            admin = User(
                email=ADMIN_EMAIL,
                username=ADMIN_USERNAME,
                role=ROLE_ADMIN,
                email_verified=True,
                profile=Profile(),
            )
            admin.set_password(ADMIN_PASSWORD)
            db.session.add(admin)
            action = "created"
        else:
            admin.role = ROLE_ADMIN
            admin.is_active = True
            admin.email_verified = True
            admin.set_password(ADMIN_PASSWORD)
            action = "updated"
        db.session.commit()
        app.logger.info("Admin user %s: %s", action, ADMIN_EMAIL)
        print(f"Admin user {action}: {ADMIN_EMAIL}")


if __name__ == "__main__":
    main()
