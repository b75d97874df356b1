"""
Сервис смены этапа лида

Любой этап может смениться любым другим (включая тот же самый).
Смена этапа не затрагивает сделки и объекты.
"""

from typing import Any, Iterable, Optional

from loguru import logger

from core.action_result import ActionResult
from core.auth_context import DEFAULT_STAFF_ROLES, AuthContext, assert_authenticated, assert_staff
from core.exceptions import NavigationSignal, NotFoundError, PipelineError, ValidationError
from modules.crm.leads.models import parse_stage, stage_label


class LeadStageService:
    """Единая операция смены этапа для карточки лида и канбан-доски"""

    def __init__(self, lead_repo, audit, staff_roles: Iterable[str] = DEFAULT_STAFF_ROLES):
        self.lead_repo = lead_repo
        self.audit = audit
        self.staff_roles = tuple(staff_roles)

    def set_stage(self, ctx: Optional[AuthContext], lead_id: str, new_stage: Any) -> ActionResult:
        """
        Смена этапа лида

        Args:
            ctx: контекст пользователя
            lead_id: ID лида
            new_stage: LeadStage или его строковое значение

        Returns:
            ActionResult с обновлённым лидом в data
        """
        try:
            assert_authenticated(ctx)
            if not lead_id:
                raise ValidationError("lead_id is required")
            try:
                stage = parse_stage(new_stage)
            except ValueError as e:
                raise ValidationError(str(e)) from e
            assert_staff(ctx, self.staff_roles)

            lead = self.lead_repo.get_lead(lead_id)
            if lead is None:
                raise NotFoundError("Lead", lead_id)

            updated_at = self.lead_repo.update_stage(lead_id, stage)
            if updated_at is None:
                raise NotFoundError("Lead", lead_id)
        except NavigationSignal:
            raise
        except PipelineError as e:
            logger.warning(f"Этап лида {lead_id} не изменён: {e.message}")
            return ActionResult.fail(e.message)
        except Exception as e:
            logger.error(f"Ошибка при смене этапа лида {lead_id}: {e}", exc_info=True)
            return ActionResult.fail("Failed to update stage")

        self.audit.log(
            ctx, "lead.stage_update", "leads", lead_id,
            {"from": lead.stage.value, "to": stage.value}
        )
        logger.info(f"Лид {lead_id}: этап {lead.stage.value} -> {stage.value}")

        updated = lead.with_stage(stage)
        updated.updated_at = updated_at
        return ActionResult.ok(updated, message=f"Этап изменён: {stage_label(stage)}")

    def list_board(self, ctx: Optional[AuthContext]) -> ActionResult:
        """Лиды для канбан-доски"""
        try:
            assert_staff(ctx, self.staff_roles)
            return ActionResult.ok(self.lead_repo.list_leads())
        except PipelineError as e:
            logger.warning(f"Не удалось загрузить лиды: {e.message}")
            return ActionResult.fail(e.message)
