from fastapi import APIRouter

from unrecorded.api.friendships import router as friendships_router
from unrecorded.api.groups import router as groups_router
from unrecorded.api.messages import router as messages_router
from unrecorded.api.notifications import router as notifications_router
from unrecorded.api.sessions import router as sessions_router
from unrecorded.api.users import router as users_router

router = APIRouter()

router.include_router(users_router)
router.include_router(friendships_router)
router.include_router(groups_router)
router.include_router(messages_router)
router.include_router(sessions_router)
router.include_router(notifications_router)


@router.get("/", tags=["root"])
def read_root() -> dict[str, str]:
    return {"message": "Welcome to the Unrecorded API"}
