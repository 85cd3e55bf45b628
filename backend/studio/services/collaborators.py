from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Callable

logger = logging.getLogger("studio.collaborators")


def _no_workflows() -> str | None:
    return None


def _skip_model_generation(domain_dir: Path) -> bool:
    logger.debug("model generation skipped domain_dir=%s", domain_dir)
    return True


def _skip_removal(view_dir: Path | None) -> None:
    logger.debug("view removal skipped view_dir=%s", view_dir)


def _skip_reports() -> None:
    return None


def _no_actions(view_dir: Path | None, update_meta: bool) -> str | None:
    return None


def _skip_menus(view_dir: Path | None, update_meta: bool) -> None:
    logger.debug("menu build skipped view_dir=%s update_meta=%s", view_dir, update_meta)


def _skip_rights() -> None:
    return None


@dataclass
class StudioCollaborators:
    """Hooks into the parts of the studio this pipeline drives but does not own."""

    process_workflows: Callable[[], str | None] = _no_workflows
    generate_models: Callable[[Path], bool] = _skip_model_generation
    remove_deleted: Callable[[Path | None], None] = _skip_removal
    process_reports: Callable[[], None] = _skip_reports
    build_actions: Callable[[Path | None, bool], str | None] = _no_actions
    build_menus: Callable[[Path | None, bool], None] = _skip_menus
    update_rights: Callable[[], None] = _skip_rights
