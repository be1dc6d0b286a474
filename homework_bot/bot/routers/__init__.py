from aiogram import Router
from .quick import router as quick_router
from .registration import router as registration_router
from .homework_edit import router as homework_edit_router
from .schedule import router as schedule_router
from .date_picker import router as date_picker_router
from .views import router as views_router
from .keyboard import router as keyboard_router
from .approval import router as approval_router
from .common import router as common_router
from .commands import router as commands_router

router = Router(name="root")

# Quick-access labels win over everything, wizard steps over keyword commands.
router.include_router(quick_router)
router.include_router(registration_router)
router.include_router(homework_edit_router)
router.include_router(schedule_router)
router.include_router(date_picker_router)
router.include_router(views_router)
router.include_router(keyboard_router)
router.include_router(approval_router)
router.include_router(common_router)
router.include_router(commands_router)
