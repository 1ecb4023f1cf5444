"""
Onboarding Options - the fixed catalog of selectable answers.

Each option's value is the display text that gets persisted, matching the
rows already stored in user_onboarding. Icons are SF Symbol names used by
the mobile client.
"""

from enum import Enum


class AgeRange(str, Enum):
    UNDER_18 = "Under 18"
    AGE_18_TO_24 = "18 to 24"
    AGE_25_TO_34 = "25 to 34"
    AGE_35_TO_49 = "35 to 49"
    AGE_50_PLUS = "50+"


class AppUsageReason(str, Enum):
    BUDGET_TRACKING = "Track my spending and stick to budgets"
    EXPENSE_ANALYSIS = "Understand where my money goes"
    SAVINGS_GOALS = "Save money for specific goals"
    DEBT_REDUCTION = "Pay off debt and reduce expenses"
    BUSINESS_EXPENSES = "Track business expenses"
    OTHER = "Something else"


class SpendingGoal(str, Enum):
    REDUCE_SPENDING = "Reduce overall spending by 20%"
    SAVE_MONEY = "Save $500+ per month"
    BUDGET_CONTROL = "Stick to monthly budgets"
    BUILD_EMERGENCY = "Build 6-month emergency fund"
    PAY_OFF_DEBT = "Pay off credit card debt"


class BudgetRange(str, Enum):
    UNDER_1K = "Under $1,000/month"
    ONE_TO_THREE_K = "$1,000 - $3,000/month"
    THREE_TO_FIVE_K = "$3,000 - $5,000/month"
    OVER_FIVE_K = "Over $5,000/month"
    PREFER_NOT_TO_SAY = "Prefer not to say"


class ExpenseCategory(str, Enum):
    FOOD = "Food & Dining"
    TRANSPORTATION = "Transportation"
    SHOPPING = "Shopping"
    ENTERTAINMENT = "Entertainment"
    BILLS = "Bills & Utilities"
    HEALTHCARE = "Healthcare"
    EDUCATION = "Education"
    TRAVEL = "Travel"
    HOUSING = "Housing"
    INSURANCE = "Insurance"
    INVESTMENTS = "Investments"
    GIFTS = "Gifts & Donations"


class ReferralSource(str, Enum):
    APP_STORE = "App Store"
    FRIEND = "Friend / Word of Mouth"
    SOCIAL = "Social Media"
    REDDIT = "Reddit"
    PRODUCT_HUNT = "Product Hunt / Hacker News"
    OTHER = "Other"


class Appearance(str, Enum):
    SYSTEM = "system"
    LIGHT = "light"
    DARK = "dark"


MAX_CATEGORY_SELECTIONS = 4

# Fewer, high-signal categories are offered during onboarding
PRIMARY_ONBOARDING_CATEGORIES = [
    ExpenseCategory.FOOD,
    ExpenseCategory.TRANSPORTATION,
    ExpenseCategory.SHOPPING,
    ExpenseCategory.ENTERTAINMENT,
    ExpenseCategory.BILLS,
    ExpenseCategory.HEALTHCARE,
    ExpenseCategory.HOUSING,
    ExpenseCategory.TRAVEL,
]

ICONS: dict[Enum, str] = {
    AgeRange.UNDER_18: "graduationcap.fill",
    AgeRange.AGE_18_TO_24: "person.fill",
    AgeRange.AGE_25_TO_34: "briefcase.fill",
    AgeRange.AGE_35_TO_49: "person.2.fill",
    AgeRange.AGE_50_PLUS: "leaf.fill",
    AppUsageReason.BUDGET_TRACKING: "chart.pie.fill",
    AppUsageReason.EXPENSE_ANALYSIS: "magnifyingglass",
    AppUsageReason.SAVINGS_GOALS: "target",
    AppUsageReason.DEBT_REDUCTION: "minus.circle.fill",
    AppUsageReason.BUSINESS_EXPENSES: "briefcase.fill",
    AppUsageReason.OTHER: "ellipsis.circle",
    SpendingGoal.REDUCE_SPENDING: "arrow.down.circle.fill",
    SpendingGoal.SAVE_MONEY: "dollarsign.circle.fill",
    SpendingGoal.BUDGET_CONTROL: "checkmark.circle.fill",
    SpendingGoal.BUILD_EMERGENCY: "shield.checkered",
    SpendingGoal.PAY_OFF_DEBT: "creditcard.fill",
    BudgetRange.UNDER_1K: "1.circle.fill",
    BudgetRange.ONE_TO_THREE_K: "2.circle.fill",
    BudgetRange.THREE_TO_FIVE_K: "3.circle.fill",
    BudgetRange.OVER_FIVE_K: "4.circle.fill",
    BudgetRange.PREFER_NOT_TO_SAY: "questionmark.circle.fill",
    ExpenseCategory.FOOD: "fork.knife",
    ExpenseCategory.TRANSPORTATION: "car.fill",
    ExpenseCategory.SHOPPING: "bag.fill",
    ExpenseCategory.ENTERTAINMENT: "tv.fill",
    ExpenseCategory.BILLS: "doc.text.fill",
    ExpenseCategory.HEALTHCARE: "cross.case.fill",
    ExpenseCategory.EDUCATION: "book.fill",
    ExpenseCategory.TRAVEL: "airplane",
    ExpenseCategory.HOUSING: "house.fill",
    ExpenseCategory.INSURANCE: "shield.fill",
    ExpenseCategory.INVESTMENTS: "chart.line.uptrend.xyaxis",
    ExpenseCategory.GIFTS: "gift.fill",
    ReferralSource.APP_STORE: "app.badge",
    ReferralSource.FRIEND: "person.2.fill",
    ReferralSource.SOCIAL: "bubble.left.and.bubble.right.fill",
    ReferralSource.REDDIT: "r.circle",
    ReferralSource.PRODUCT_HUNT: "globe",
    ReferralSource.OTHER: "ellipsis.circle",
    Appearance.SYSTEM: "circle.lefthalf.filled",
    Appearance.LIGHT: "sun.max.fill",
    Appearance.DARK: "moon.fill",
}


def _describe(options) -> list[dict]:
    return [{"id": o.name.lower(), "label": o.value, "icon": ICONS.get(o, "")} for o in options]


def catalog_order(values, enum_type: type[Enum]) -> list:
    """Sort a selection by the enum's declaration order."""
    order = {member: i for i, member in enumerate(enum_type)}
    return sorted(values, key=order.__getitem__)


def get_form_options() -> dict:
    """
    Get all option lists for frontend rendering.

    Returns dict with one list per question plus the category cap.
    Option labels are the values expected back in selection requests.
    """
    return {
        "appearances": _describe(Appearance),
        "referral_sources": _describe(ReferralSource),
        "usage_reasons": _describe(AppUsageReason),
        "spending_goals": _describe(SpendingGoal),
        "budget_ranges": _describe(BudgetRange),
        "categories": _describe(PRIMARY_ONBOARDING_CATEGORIES),
        "age_ranges": _describe(AgeRange),
        "max_category_selections": MAX_CATEGORY_SELECTIONS,
    }
