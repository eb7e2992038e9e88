"""
Flow Test Scorecard

Ordered checklist of named pass/fail records, printable as the operator
report and assertable by id.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional


class Section(str, Enum):
    """Report section a checklist item belongs to"""
    CORE_API = "core_api"
    USER_FLOW = "user_flow"
    ADMIN_PANEL = "admin_panel"


SECTION_TITLES = {
    Section.CORE_API: "🔧 Core API",
    Section.USER_FLOW: "👤 User Flow",
    Section.ADMIN_PANEL: "👨‍💼 Admin Panel",
}


class Verdict(str, Enum):
    """Overall verdict derived from the pass ratio"""
    FULL_PASS = "full_pass"
    MOSTLY_FUNCTIONAL = "mostly_functional"
    NEEDS_ATTENTION = "needs_attention"


MOSTLY_FUNCTIONAL_RATIO = 0.7

VERDICT_BANNERS = {
    Verdict.FULL_PASS: "🎉 ALL TESTS PASSED! Your e-commerce platform is fully functional!",
    Verdict.MOSTLY_FUNCTIONAL: "✅ Most tests passed! Platform is largely functional with minor issues.",
    Verdict.NEEDS_ATTENTION: "⚠️ Some core functionality needs attention before production.",
}


@dataclass
class CheckResult:
    """Single checklist item"""
    id: str
    description: str
    section: Section
    passed: bool = False
    detail: Optional[str] = None


# (id, description, section) in execution and report order
CHECKLIST = (
    ("health_check", "Health Check", Section.CORE_API),
    ("product_listing", "Product Listing", Section.CORE_API),
    ("product_detail", "Product Detail", Section.CORE_API),
    ("user_registration", "User Registration", Section.USER_FLOW),
    ("user_login", "User Login", Section.USER_FLOW),
    ("add_to_cart", "Add To Cart", Section.USER_FLOW),
    ("cart_retrieval", "Cart Retrieval", Section.USER_FLOW),
    ("order_creation", "Order Creation", Section.USER_FLOW),
    ("admin_access", "Admin Access", Section.ADMIN_PANEL),
    ("admin_products", "Admin Products", Section.ADMIN_PANEL),
    ("admin_orders", "Admin Orders", Section.ADMIN_PANEL),
)


class Scorecard:
    """
    Results for every checklist item, all starting as not passed.

    Example:
        card = Scorecard()
        card.record("health_check", True)
        card["health_check"].passed  # True
    """

    def __init__(self):
        self._results: Dict[str, CheckResult] = {
            check_id: CheckResult(id=check_id, description=description, section=section)
            for check_id, description, section in CHECKLIST
        }

    def __getitem__(self, check_id: str) -> CheckResult:
        return self._results[check_id]

    def __iter__(self) -> Iterator[CheckResult]:
        return iter(self._results.values())

    def record(self, check_id: str, passed: bool, detail: Optional[str] = None) -> CheckResult:
        result = self._results[check_id]
        result.passed = passed
        result.detail = detail
        return result

    @property
    def total(self) -> int:
        return len(self._results)

    @property
    def passed_count(self) -> int:
        return sum(1 for r in self if r.passed)

    @property
    def ratio(self) -> float:
        if self.total == 0:
            return 1.0
        return self.passed_count / self.total

    @property
    def verdict(self) -> Verdict:
        if self.passed_count == self.total:
            return Verdict.FULL_PASS
        if self.ratio >= MOSTLY_FUNCTIONAL_RATIO:
            return Verdict.MOSTLY_FUNCTIONAL
        return Verdict.NEEDS_ATTENTION

    def section(self, section: Section) -> List[CheckResult]:
        return [r for r in self if r.section == section]

    def as_dict(self) -> Dict[str, bool]:
        return {r.id: r.passed for r in self}

    def render(self, client_base_url: str, admin_email: str) -> str:
        """Human-readable report with the three sections and the verdict banner."""
        lines = [
            "",
            "=" * 60,
            "📊 E-COMMERCE FLOW TEST RESULTS",
            "=" * 60,
            "",
            f"🎯 Overall Score: {self.passed_count}/{self.total} tests passed",
            "",
        ]

        for section, title in SECTION_TITLES.items():
            lines.append(f"{title}:")
            for result in self.section(section):
                status = "✅" if result.passed else "❌"
                lines.append(f"  {status} {result.description}")
            lines.append("")

        client_base_url = client_base_url.rstrip("/")
        lines.extend([
            "🌐 Frontend Access:",
            f"  🛒 Main Store: {client_base_url}",
            f"  👨‍💼 Admin Panel: {client_base_url}/admin",
            "",
            "🔐 Admin Account:",
            f"  📧 Email: {admin_email}",
            "",
            VERDICT_BANNERS[self.verdict],
            "=" * 60,
        ])
        return "\n".join(lines)
