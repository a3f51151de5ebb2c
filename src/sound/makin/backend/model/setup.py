import logging
import os
from types import ModuleType
from typing import Optional

from sound.makin.backend.loader import LoadReport, load_and_apply
from sound.makin.backend.model.base import Database

logger = logging.getLogger(__name__)

MODELS_PATH = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "models"
)


async def apply_models(
    database: Database, models_path: Optional[str] = None
) -> LoadReport:
    """
    Register every model module against the shared database handle.

    Each module in the models directory must expose register(database). It is called
    once per module with the same Database instance and awaited when it is a coroutine.
    """
    if models_path is None:
        models_path = MODELS_PATH

    def register(module: ModuleType, filename: str):
        register_fn = getattr(module, "register", None)
        if register_fn is None:
            raise AttributeError(f"{filename} does not expose register(database)")
        return register_fn(database)

    report = await load_and_apply(models_path, register)
    logger.info(
        "Registered %d model modules from %s (%d errors)",
        len(report.loaded),
        models_path,
        len(report.errors),
    )
    return report
