"""
Onboarding API Endpoints.

Thin HTTP surface over OnboardingWizard. One live session per authenticated
user; every rule (gating, category cap, personalization, persistence) lives
in the wizard.
"""

import logging

from fastapi import APIRouter, Depends, Header, HTTPException
from pydantic import BaseModel, Field

from .options import (
    Appearance,
    AppUsageReason,
    BudgetRange,
    ExpenseCategory,
    ReferralSource,
    SpendingGoal,
    get_form_options,
)
from .service import SessionRegistry, schema_capabilities
from .steps import OnboardingStep
from .wizard import OnboardingWizard

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/onboarding", tags=["onboarding"])

_registry = SessionRegistry()


def get_registry() -> SessionRegistry:
    return _registry


# =============================================================================
# Auth
# =============================================================================

class AuthenticatedUser(BaseModel):
    """Authenticated user info from Supabase JWT."""
    id: str
    email: str | None
    access_token: str


async def get_current_user(authorization: str = Header(None)) -> AuthenticatedUser:
    """
    Validate Supabase JWT and extract user info.

    Expects: Authorization: Bearer <supabase_access_token>
    """
    from spendsmart.db.client import get_service_client

    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing or invalid authorization header")

    token = authorization.replace("Bearer ", "")

    try:
        client = get_service_client()
        user_response = client.auth.get_user(token)

        if not user_response or not user_response.user:
            raise HTTPException(status_code=401, detail="Invalid token")

        return AuthenticatedUser(
            id=user_response.user.id,
            email=user_response.user.email,
            access_token=token,
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Auth error: {e}")
        raise HTTPException(status_code=401, detail="Authentication failed")


# =============================================================================
# Request/Response Models
# =============================================================================


class SelectionsRequest(BaseModel):
    """
    Answers to apply. Omitted fields are left unchanged.

    `categories` and `spending_goals` replace the current selection;
    categories beyond the fourth are ignored.
    """
    appearance: Appearance | None = None
    referral_source: ReferralSource | None = None
    usage_reason: AppUsageReason | None = None
    budget_range: BudgetRange | None = None
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    categories: list[ExpenseCategory] | None = None
    spending_goals: list[SpendingGoal] | None = None


class StateResponse(BaseModel):
    """Current session state plus display metadata for the current step."""
    user_id: str
    title: str
    subtitle: str | None
    visual_phase: str
    can_advance: bool
    progress_fraction: float
    total_steps: int
    state: dict


class StepResponse(BaseModel):
    """Response after a navigation request."""
    success: bool
    current_step: str
    message: str = ""


class CompleteResponse(BaseModel):
    success: bool
    has_error: bool
    error_message: str = ""


# =============================================================================
# Helpers
# =============================================================================


def build_state_response(user_id: str, wizard: OnboardingWizard) -> StateResponse:
    snapshot = wizard.snapshot()
    step = snapshot.current_step
    return StateResponse(
        user_id=user_id,
        title=step.title,
        subtitle=step.subtitle,
        visual_phase=step.visual_phase.value,
        can_advance=wizard.can_advance(),
        progress_fraction=wizard.progress_fraction(),
        total_steps=OnboardingStep.total(),
        state=snapshot.to_dict(),
    )


def apply_selections(wizard: OnboardingWizard, request: SelectionsRequest) -> None:
    if request.appearance is not None:
        wizard.select_appearance(request.appearance)
    if request.referral_source is not None:
        wizard.select_referral(request.referral_source)
    if request.usage_reason is not None:
        wizard.select_usage_reason(request.usage_reason)
    if request.budget_range is not None:
        wizard.select_budget_range(request.budget_range)
    if request.currency is not None:
        wizard.set_currency(request.currency)

    if request.categories is not None:
        wanted = list(dict.fromkeys(request.categories))
        for category in list(wizard.state.categories):
            if category not in wanted:
                wizard.toggle_category(category)
        for category in wanted:
            if category not in wizard.state.categories:
                wizard.toggle_category(category)

    if request.spending_goals is not None:
        wanted_goals = set(request.spending_goals)
        for goal in wizard.state.spending_goals ^ wanted_goals:
            wizard.toggle_spending_goal(goal)


# =============================================================================
# Endpoints
# =============================================================================


@router.get("/options")
async def get_onboarding_options():
    """
    Option catalog and step metadata for rendering.

    Option labels are the values expected by POST /selections.
    """
    return {
        **get_form_options(),
        "steps": [
            {
                "id": step.name.lower(),
                "index": step.value,
                "title": step.title,
                "subtitle": step.subtitle,
                "visual_phase": step.visual_phase.value,
            }
            for step in OnboardingStep
        ],
    }


@router.get("/state", response_model=StateResponse)
async def get_onboarding_state(
    user: AuthenticatedUser = Depends(get_current_user),
    registry: SessionRegistry = Depends(get_registry),
) -> StateResponse:
    """Get (or start) the user's onboarding session."""
    wizard = registry.get_or_create(user.id)
    return build_state_response(user.id, wizard)


@router.post("/selections", response_model=StateResponse)
async def submit_selections(
    request: SelectionsRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    registry: SessionRegistry = Depends(get_registry),
) -> StateResponse:
    """Record answers. Does not change the step."""
    wizard = registry.get_or_create(user.id)
    if wizard.state.is_processing:
        raise HTTPException(status_code=409, detail="Personalization in progress")
    apply_selections(wizard, request)
    return build_state_response(user.id, wizard)


@router.post("/next", response_model=StepResponse)
async def next_step(
    user: AuthenticatedUser = Depends(get_current_user),
    registry: SessionRegistry = Depends(get_registry),
) -> StepResponse:
    """Advance if the current step is complete."""
    wizard = registry.get_or_create(user.id)
    moved = wizard.advance()
    current = wizard.state.current_step.name.lower()
    return StepResponse(
        success=moved,
        current_step=current,
        message=f"Moved to {current}" if moved else f"Cannot advance from {current}",
    )


@router.post("/back", response_model=StepResponse)
async def previous_step(
    user: AuthenticatedUser = Depends(get_current_user),
    registry: SessionRegistry = Depends(get_registry),
) -> StepResponse:
    """Go back one step. Answers are kept."""
    wizard = registry.get_or_create(user.id)
    moved = wizard.retreat()
    current = wizard.state.current_step.name.lower()
    return StepResponse(
        success=moved,
        current_step=current,
        message=f"Moved to {current}" if moved else f"Cannot go back from {current}",
    )


@router.post("/complete", response_model=CompleteResponse)
async def complete_onboarding(
    user: AuthenticatedUser = Depends(get_current_user),
    registry: SessionRegistry = Depends(get_registry),
) -> CompleteResponse:
    """Finish onboarding from the completion step and close the session."""
    wizard = registry.get(user.id)
    if wizard is None:
        raise HTTPException(status_code=404, detail="No onboarding session")
    if wizard.state.current_step is not OnboardingStep.COMPLETION:
        raise HTTPException(
            status_code=400,
            detail=f"Onboarding is on step {wizard.state.current_step.name.lower()}, not completion",
        )

    published = await wizard.complete_onboarding()
    state = wizard.snapshot()
    await registry.end(user.id)

    return CompleteResponse(
        success=published,
        has_error=state.has_error,
        error_message=state.error_message,
    )


@router.delete("/session")
async def end_session(
    user: AuthenticatedUser = Depends(get_current_user),
    registry: SessionRegistry = Depends(get_registry),
):
    """Abandon the session. A running personalization phase stops without saving."""
    ended = await registry.end(user.id)
    return {"success": ended}


@router.get("/schema")
async def get_schema_status(user: AuthenticatedUser = Depends(get_current_user)):
    """Optional-column support learned so far for user_onboarding."""
    return schema_capabilities.report()
