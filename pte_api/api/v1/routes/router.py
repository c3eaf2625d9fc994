# Main Router - pte_api/api/v1/routes/router.py
from fastapi import APIRouter, Depends
from pte_api.api.dependencies.subscription import ensure_user_has_subscription
from pte_api.api.v1.routes.auth.auth import router as auth_router
from pte_api.api.v1.routes.user.user import router as user_router
from pte_api.api.v1.routes.subscription.subscription import router as subscription_router
from pte_api.api.v1.routes.catalog.questions import router as questions_router
from pte_api.api.v1.routes.catalog.pte_tests import router as tests_router
from pte_api.api.v1.routes.attempts.attempts import router as attempts_router
from pte_api.api.v1.routes.practice.practice import router as practice_router
from pte_api.api.v1.routes.scoring.scoring import router as scoring_router
from pte_api.api.v1.routes.uploads.uploads import router as uploads_router
from pte_api.api.v1.routes.realtime.realtime import router as realtime_router
from pte_api.api.v1.routes.dashboard.dashboard import router as dashboard_router

router = APIRouter()

# Public/Auth routes (no subscription check needed)
router.include_router(auth_router)

# Protected routes (require active subscription)
protected_router = APIRouter(dependencies=[Depends(ensure_user_has_subscription)])
protected_router.include_router(user_router)
protected_router.include_router(subscription_router)
protected_router.include_router(questions_router)
protected_router.include_router(tests_router)
protected_router.include_router(attempts_router)
protected_router.include_router(practice_router)
protected_router.include_router(scoring_router)
protected_router.include_router(uploads_router)
protected_router.include_router(realtime_router)
protected_router.include_router(dashboard_router)

# Include protected router in main router
router.include_router(protected_router)
