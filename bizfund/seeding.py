"""Demo data bootstrap: users, wallets, projects, investments and deposits.

The roster (1 admin, 5 investors, 3 businesses) is upserted on natural keys,
so re-running never duplicates users or wallets. Projects, investments and
deposit transactions are created unconditionally and accumulate on every run.

All randomness comes from the injected ``random.Random`` and all timestamps
from the injected clock, so a seeded generator produces identical data.
"""
from __future__ import annotations

import random
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from bizfund.core.logger import get_logger, timeit
from bizfund.core.security import SecurityProvider
from bizfund.models import (
    Investment,
    Project,
    ProjectStatus,
    Transaction,
    TransactionStatus,
    TransactionType,
    User,
    UserRole,
    Wallet,
)
from bizfund.models.base import ZERO, utcnow
from bizfund.services.investments_service import apply_funding, expected_return
from bizfund.services.wallets_service import generate_reference

LOGGER = get_logger(__name__)

ADMIN_EMAIL = "admin@bizfundraiser.com"
INVESTOR_COUNT = 5
INVESTOR_BASE_BALANCE = Decimal("100000")
INVESTOR_BALANCE_STEP = Decimal("50000")

# A project is approved when rng.random() exceeds this, i.e. with probability 0.7.
APPROVAL_THRESHOLD = 0.3
INVESTOR_COUNT_RANGE = (2, 4)
MAX_POOL_SHARE = Decimal("0.8")
MIN_CONTRIBUTION = 100000
DEPOSIT_AMOUNTS = (Decimal("50000"), Decimal("75000"), Decimal("100000"))

DEFAULT_PASSWORDS = {
    UserRole.ADMIN: "admin123",
    UserRole.INVESTOR: "investor123",
    UserRole.BUSINESS: "business123",
}

PROJECT_DOCUMENTS = (
    "https://example.com/business-plan.pdf",
    "https://example.com/financial-projections.pdf",
    "https://example.com/team-profile.pdf",
)


@dataclass(frozen=True)
class BusinessSeed:
    name: str
    email: str
    description: str


@dataclass(frozen=True)
class ProjectSeed:
    title: str
    description: str
    amount_requested: Decimal
    duration: int
    expected_roi: int
    business_index: int


BUSINESSES: tuple[BusinessSeed, ...] = (
    BusinessSeed("TechStart Solutions", "business1@example.com", "AI-powered mobile app development"),
    BusinessSeed("GreenEnergy Ltd", "business2@example.com", "Renewable energy solutions"),
    BusinessSeed("AgriTech Innovations", "business3@example.com", "Smart farming technology"),
)

PROJECTS: tuple[ProjectSeed, ...] = (
    ProjectSeed(
        "AI-Powered Mobile Banking App",
        "Revolutionary mobile banking application with AI-driven financial insights "
        "and automated investment recommendations.",
        Decimal("5000000"),
        12,
        25,
        0,
    ),
    ProjectSeed(
        "Solar Panel Manufacturing Plant",
        "Establishment of a modern solar panel manufacturing facility to meet growing "
        "demand for renewable energy.",
        Decimal("15000000"),
        18,
        30,
        1,
    ),
    ProjectSeed(
        "Smart Irrigation System",
        "IoT-based smart irrigation system for smallholder farmers to optimize water "
        "usage and increase crop yield.",
        Decimal("3000000"),
        8,
        20,
        2,
    ),
    ProjectSeed(
        "E-commerce Platform for SMEs",
        "Comprehensive e-commerce platform designed specifically for small and medium "
        "enterprises in Nigeria.",
        Decimal("8000000"),
        15,
        35,
        0,
    ),
    ProjectSeed(
        "Electric Vehicle Charging Network",
        "Nationwide network of electric vehicle charging stations to support the "
        "growing EV market.",
        Decimal("20000000"),
        24,
        28,
        1,
    ),
)


@dataclass
class Roster:
    admin: User
    investors: list[User]
    businesses: list[User]


@dataclass
class SeedReport:
    """Counts of what a seed run touched."""

    admins: int = 0
    investors: int = 0
    businesses: int = 0
    projects: int = 0
    approved_projects: int = 0
    funded_projects: int = 0
    investments: int = 0
    transactions: int = 0
    project_ids: list[int] = field(default_factory=list)


def contribution_amounts(
    rng: random.Random, amount_requested: Decimal, investor_count: int
) -> list[Decimal]:
    """Draw one independent contribution per investor.

    Each is ``100000 + randrange(floor(0.8 * requested / n))``; the draws are
    not normalised, so their sum may fall short of or exceed the 80% pool.
    """

    max_pool = amount_requested * MAX_POOL_SHARE
    span = int(max_pool // investor_count)
    return [
        Decimal(MIN_CONTRIBUTION + (rng.randrange(span) if span > 0 else 0))
        for _ in range(investor_count)
    ]


class SeedGenerator:
    """Populate the identity store with a fixed demo roster and random activity."""

    def __init__(
        self,
        session: Session,
        *,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] | None = None,
        passwords: dict[UserRole, str] | None = None,
    ) -> None:
        self._session = session
        self._rng = rng or random.Random()
        self._clock = clock or utcnow
        self._passwords = dict(DEFAULT_PASSWORDS, **(passwords or {}))
        self._hashes: dict[UserRole, str] = {}

    def _password_hash(self, role: UserRole) -> str:
        if role not in self._hashes:
            self._hashes[role] = SecurityProvider.hash_password(self._passwords[role])
        return self._hashes[role]

    def upsert_user(self, email: str, role: UserRole, **profile: object) -> User:
        """Return the user with ``email``, creating it when absent.

        Existing rows are left untouched.
        """

        user = self._session.execute(select(User).where(User.email == email)).scalar_one_or_none()
        if user is not None:
            LOGGER.debug("User %s already present (id=%s)", email, user.id)
            return user
        user = User(
            email=email,
            password_hash=self._password_hash(role),
            role=role,
            kyc_completed=True,
            **profile,
        )
        self._session.add(user)
        self._session.commit()
        LOGGER.debug("Created %s user %s (id=%s)", role.value, email, user.id)
        return user

    def upsert_wallet(self, user: User, balance: Decimal) -> Wallet:
        """Return the wallet of ``user``, creating it with ``balance`` when absent."""

        wallet = self._session.execute(
            select(Wallet).where(Wallet.user_id == user.id)
        ).scalar_one_or_none()
        if wallet is not None:
            return wallet
        wallet = Wallet(user_id=user.id, balance=balance)
        self._session.add(wallet)
        self._session.commit()
        return wallet

    def seed_roster(self) -> Roster:
        admin = self.upsert_user(
            ADMIN_EMAIL,
            UserRole.ADMIN,
            first_name="Admin",
            last_name="User",
            phone="+2348000000000",
            address="Lagos, Nigeria",
            id_number="ADM001",
            id_document="https://example.com/id/ADM001.pdf",
        )
        self.upsert_wallet(admin, ZERO)

        investors: list[User] = []
        for index in range(1, INVESTOR_COUNT + 1):
            investor = self.upsert_user(
                f"investor{index}@example.com",
                UserRole.INVESTOR,
                first_name="Investor",
                last_name=str(index),
                phone=f"+234800000000{index}",
                address="Lagos, Nigeria",
                id_number=f"INV00{index}",
                id_document=f"https://example.com/id/INV00{index}.pdf",
            )
            self.upsert_wallet(investor, INVESTOR_BASE_BALANCE + index * INVESTOR_BALANCE_STEP)
            investors.append(investor)

        businesses: list[User] = []
        for index, seed in enumerate(BUSINESSES, start=1):
            business = self.upsert_user(
                seed.email,
                UserRole.BUSINESS,
                first_name="Business",
                last_name=str(index),
                phone=f"+23480000000{index}0",
                address="Lagos, Nigeria",
                id_number=f"BUS00{index}",
                id_document=f"https://example.com/id/BUS00{index}.pdf",
                business_name=seed.name,
                cac_number=f"CAC{index}234567",
                tax_id=f"TAX{index}234567",
                business_address="Lagos, Nigeria",
            )
            self.upsert_wallet(business, ZERO)
            businesses.append(business)

        return Roster(admin=admin, investors=investors, businesses=businesses)

    def seed_projects(self, businesses: Sequence[User]) -> list[Project]:
        projects: list[Project] = []
        for seed in PROJECTS:
            status = (
                ProjectStatus.APPROVED
                if self._rng.random() > APPROVAL_THRESHOLD
                else ProjectStatus.PENDING
            )
            project = Project(
                title=seed.title,
                description=seed.description,
                business_id=businesses[seed.business_index].id,
                amount_requested=seed.amount_requested,
                duration=seed.duration,
                expected_roi=seed.expected_roi,
                status=status,
                documents=list(PROJECT_DOCUMENTS),
            )
            self._session.add(project)
            projects.append(project)
        self._session.commit()
        return projects

    def simulate_investments(self, project: Project, investors: Sequence[User]) -> list[Investment]:
        """Invest the first N investors into an approved project.

        Wallets are debited without an underflow check.
        """

        count = self._rng.randint(*INVESTOR_COUNT_RANGE)
        selected = list(investors[:count])
        amounts = contribution_amounts(self._rng, project.amount_requested, count)

        investments: list[Investment] = []
        total = ZERO
        for investor, amount in zip(selected, amounts):
            investment = Investment(
                investor_id=investor.id,
                project_id=project.id,
                amount=amount,
                expected_return=expected_return(amount, project.expected_roi),
            )
            self._session.add(investment)
            wallet = self._session.execute(
                select(Wallet).where(Wallet.user_id == investor.id)
            ).scalar_one()
            wallet.balance = wallet.balance - amount
            total += amount
            investments.append(investment)

        project.amount_raised = total
        apply_funding(project, now=self._clock())
        self._session.commit()
        LOGGER.debug(
            "Project id=%s raised %s from %s investors (%s)",
            project.id,
            total,
            len(selected),
            project.status.value,
        )
        return investments

    def seed_deposits(self, investors: Sequence[User]) -> list[Transaction]:
        """Record three completed deposits per investor; balances are not changed."""

        transactions: list[Transaction] = []
        for investor in investors:
            for index, amount in enumerate(DEPOSIT_AMOUNTS, start=1):
                transaction = Transaction(
                    user_id=investor.id,
                    type=TransactionType.DEPOSIT,
                    status=TransactionStatus.COMPLETED,
                    amount=amount,
                    description=f"Initial deposit {index}",
                    reference=generate_reference("DEP", rng=self._rng, clock=self._clock),
                    completed_at=self._clock(),
                )
                self._session.add(transaction)
                transactions.append(transaction)
            self._session.commit()
        return transactions

    def run(self) -> SeedReport:
        """Execute every seeding stage in order and return what was created."""

        report = SeedReport()
        with timeit("Seeding database", unit="rows", track_db_calls=True, session=self._session) as timer:
            roster = self.seed_roster()
            report.admins = 1
            report.investors = len(roster.investors)
            report.businesses = len(roster.businesses)

            projects = self.seed_projects(roster.businesses)
            report.projects = len(projects)
            report.project_ids = [project.id for project in projects]

            for project in projects:
                if project.status != ProjectStatus.APPROVED:
                    continue
                report.approved_projects += 1
                report.investments += len(self.simulate_investments(project, roster.investors))
                if project.status == ProjectStatus.FUNDED:
                    report.funded_projects += 1

            report.transactions = len(self.seed_deposits(roster.investors))
            timer.set_total(
                report.admins
                + report.investors
                + report.businesses
                + report.projects
                + report.investments
                + report.transactions
            )

        LOGGER.info("Seeded %s investors and %s businesses", report.investors, report.businesses)
        LOGGER.info(
            "Created %s projects (%s approved, %s funded), %s investments, %s transactions",
            report.projects,
            report.approved_projects,
            report.funded_projects,
            report.investments,
            report.transactions,
        )
        return report
