"""
JobBoard Database Seeder

Creates the bootstrap admin, two job seekers and a little analytics history
so the admin console has something to show:
- logins spread over the last six weeks (some outside the 30-day window)
- applications to three jobs
"""

from datetime import datetime, timedelta, timezone

from jobboard.core.config import settings
from jobboard.db.repositories import APPLICATIONS, LOGINS, PAGE_VIEWS
from jobboard.models import ApplicationEvent, LoginEvent, PageViewEvent
from jobboard.services import build_services

DEMO_USERS = [
    ("john.doe@example.com", "candidate123", "John Doe", "+919800000001"),
    ("jane.smith@example.com", "candidate123", "Jane Smith", "+919800000002"),
]

DEMO_JOBS = [
    ("job-101", "Backend Engineer", "Acme Corp"),
    ("job-102", "Data Analyst", "Globex"),
    ("job-103", "Product Designer", "Initech"),
]


def seed_database():
    """Seed the configured store with test data."""

    services = build_services(settings)

    if services.users.get_by_email(DEMO_USERS[0][0]):
        print("Database already seeded. Skipping...")
        return

    print("Seeding database...")

    admin_email = settings.ADMIN_EMAIL or "admin@jobboard.local"
    admin_password = settings.ADMIN_PASSWORD or "admin123"
    services.credentials.ensure_admin(admin_email, admin_password)

    created = [
        services.credentials.create_user(email, password, name=name, mobile=mobile)
        for email, password, name, mobile in DEMO_USERS
    ]

    now = datetime.now(timezone.utc)
    for user_index, user in enumerate(created):
        for days_ago in (42, 35, 20, 6, 1)[user_index:]:
            services.events.append(
                LOGINS,
                LoginEvent(
                    user_id=user.id,
                    email=user.email,
                    timestamp=(now - timedelta(days=days_ago)).isoformat(),
                ),
            )

    john, jane = created
    applications = [
        (john, DEMO_JOBS[0], 20),
        (john, DEMO_JOBS[1], 6),
        (jane, DEMO_JOBS[0], 5),
        (jane, DEMO_JOBS[2], 1),
    ]
    for user, (job_id, title, company), days_ago in applications:
        services.events.append(
            APPLICATIONS,
            ApplicationEvent(
                user_id=user.id,
                email=user.email,
                job_id=job_id,
                job_title=title,
                company=company,
                timestamp=(now - timedelta(days=days_ago)).isoformat(),
            ),
        )

    services.events.append(
        PAGE_VIEWS,
        PageViewEvent(user_id=jane.id, email=jane.email, page="/jobs/job-103", timestamp=now.isoformat()),
    )

    print("✅ Database seeded successfully!")
    print("\n📋 Created Users:")
    print(f"   - {admin_email} (password: {admin_password}) [ADMIN]")
    for email, password, name, _ in DEMO_USERS:
        print(f"   - {email} (password: {password}) [{name}]")


if __name__ == "__main__":
    seed_database()
