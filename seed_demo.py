import os
import sys
from datetime import datetime, timedelta, timezone

# Add project root to path
sys.path.append(os.getcwd())

from tenderdesk.app.auth import schemas as auth_schemas
from tenderdesk.app.auth import service as auth_service
from tenderdesk.app.core.database import get_session, init_db
from tenderdesk.app.modules.clients import schemas as client_schemas
from tenderdesk.app.modules.clients import service as client_service
from tenderdesk.app.modules.templates import schemas as template_schemas
from tenderdesk.app.modules.templates import service as template_service
from tenderdesk.app.modules.tenders.schemas import TenderCreate
from tenderdesk.app.modules.tenders.service import TenderService

DEMO_EMAIL = os.getenv("TD_DEMO_EMAIL", "demo@tenderdesk.local")
DEMO_PASSWORD = os.getenv("TD_DEMO_PASSWORD", "Demo12345")


def seed_demo():
    init_db()
    with get_session() as db:
        user = auth_service.get_user_by_email(db, DEMO_EMAIL)
        if user:
            print(f"Demo user '{DEMO_EMAIL}' already exists, nothing to do.")
            return

        print(f"Creating demo user '{DEMO_EMAIL}'...")
        user = auth_service.create_user(
            db,
            auth_schemas.UserCreate(email=DEMO_EMAIL, password=DEMO_PASSWORD, full_name="Demo Nutzer"),
        )

        client_service.create_client(
            db,
            user.id,
            client_schemas.ClientCreate(
                name="Stadt Musterstadt",
                contact_person="Frau Klein",
                email="vergabe@musterstadt.de",
                quick_check_info="Nur elektronische Abgabe über die Vergabeplattform",
                kalkulation_info="Tariflohn Gebäudereinigung beachten",
            ),
        )
        template_service.create_template(
            db,
            user.id,
            template_schemas.MilestoneTemplateCreate(
                title="Quick Check",
                description="Erste Prüfung der Ausschreibung",
                checklist_items=["Unterlagen vollständig gelesen", "Eignungskriterien geprüft", "Go/No-Go entschieden"],
            ),
        )

        tenders = TenderService(db)
        now = datetime.now(tz=timezone.utc)
        for title, status, days in [
            ("Unterhaltsreinigung Rathaus", "in-bearbeitung", 21),
            ("Glasreinigung Grundschule", "abgegeben", 7),
            ("Winterdienst Bauhof", "gewonnen", -30),
        ]:
            tender = tenders.create_tender(
                owner=user,
                payload=TenderCreate(
                    title=title,
                    client="Stadt Musterstadt",
                    status=status,
                    due_date=now + timedelta(days=days),
                ),
            )
            print(f"Created tender {tender.id}: {title}")
    print("Demo data created successfully.")


if __name__ == "__main__":
    seed_demo()
