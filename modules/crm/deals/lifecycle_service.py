"""
Сервис жизненного цикла сделки

Создание, обновление и удаление сделок с синхронизацией статуса объекта.
Сбой синхронизации статуса не отменяет уже сохранённую сделку:
ошибка логируется, а статус восстановится при следующем изменении
сделок по объекту (или при пересчёте scripts/resync_property_statuses.py).
"""

from typing import Any, Dict, Iterable, Mapping, Optional

from loguru import logger

from core.action_result import ActionResult
from core.auth_context import DEFAULT_STAFF_ROLES, AuthContext, assert_authenticated, assert_staff
from core.exceptions import (
    NavigationSignal,
    NotFoundError,
    PersistenceError,
    PipelineError,
    ValidationError,
)
from modules.crm.deals.models import DealStatus, DealType
from modules.crm.deals.schemas import (
    CreateDealInput,
    add_months,
    parse_create_input,
    parse_update_input,
)

ENTITY = "deals"


class DealLifecycleService:
    """Операции над сделками, доступные сотрудникам"""

    # Синхронизация объекта, по которому сделка стала выигранной
    GAIN_RECOMPUTE = "recompute"  # полный пересчёт проектором
    GAIN_DIRECT = "direct"  # прямая запись SOLD/RENTED

    def __init__(
        self,
        deal_repo,
        projector,
        audit,
        staff_roles: Iterable[str] = DEFAULT_STAFF_ROLES,
        gain_strategy: str = GAIN_RECOMPUTE
    ):
        if gain_strategy not in (self.GAIN_RECOMPUTE, self.GAIN_DIRECT):
            raise ValueError(f"Unknown gain strategy: {gain_strategy}")
        self.deal_repo = deal_repo
        self.projector = projector
        self.audit = audit
        self.staff_roles = tuple(staff_roles)
        self.gain_strategy = gain_strategy

    # ------------------------------------------------------------------
    # Мутации
    # ------------------------------------------------------------------

    def create_deal(self, ctx: Optional[AuthContext], payload: Mapping[str, Any]) -> ActionResult:
        """
        Создание сделки

        Args:
            ctx: контекст пользователя
            payload: данные формы (lead_id, property_id, deal_type обязательны)

        Returns:
            ActionResult с сохранённой сделкой в data
        """
        try:
            assert_authenticated(ctx)
            validated = parse_create_input(payload)
            assert_staff(ctx, self.staff_roles)

            deal = self.deal_repo.create_deal(self._build_create_fields(validated, ctx.user_id))
        except NavigationSignal:
            raise
        except PipelineError as e:
            logger.warning(f"Сделка не создана: {e.message}")
            return ActionResult.fail(e.message)
        except Exception as e:
            logger.error(f"Ошибка при создании сделки: {e}", exc_info=True)
            return ActionResult.fail("Failed to create deal")

        self.audit.log(ctx, "deal.create", ENTITY, deal.id, validated.model_dump(mode="json"))

        if deal.status == DealStatus.CLOSED_WIN:
            self._sync_gained_property(deal.property_id, deal.deal_type)

        logger.info(
            f"Сделка {deal.id} создана: lead={deal.lead_id}, property={deal.property_id}, "
            f"type={deal.deal_type.value}, status={deal.status.value}"
        )
        return ActionResult.ok(deal)

    def update_deal(self, ctx: Optional[AuthContext], payload: Mapping[str, Any]) -> ActionResult:
        """
        Частичное обновление сделки

        Пропущенные поля status/property_id/deal_type берутся из текущей записи.
        Если сделка перестала быть выигранной или переехала на другой объект,
        прежний объект пересчитывается полностью: на нём может оставаться
        другая выигранная сделка.
        """
        try:
            assert_authenticated(ctx)
            validated = parse_update_input(payload)
            assert_staff(ctx, self.staff_roles)

            current = self.deal_repo.get_deal(validated.id)
            if current is None:
                raise NotFoundError("Deal", validated.id)

            changes = validated.model_dump(exclude_unset=True, exclude={"id"})
            duration_months = changes.pop("duration_months", None)

            next_status = validated.status or current.status
            next_property_id = validated.property_id or current.property_id
            next_deal_type = validated.deal_type or current.deal_type

            if next_deal_type == DealType.RENT and duration_months:
                if "transaction_date" in changes:
                    start = changes["transaction_date"]
                else:
                    start = current.transaction_date
                if start:
                    changes["transaction_end_date"] = add_months(start, duration_months)

            updated = self.deal_repo.update_deal(validated.id, changes)
            if updated is None:
                raise NotFoundError("Deal", validated.id)
        except NavigationSignal:
            raise
        except PipelineError as e:
            logger.warning(f"Сделка не обновлена: {e.message}")
            return ActionResult.fail(e.message)
        except Exception as e:
            logger.error(f"Ошибка при обновлении сделки: {e}", exc_info=True)
            return ActionResult.fail("Failed to update deal")

        self.audit.log(
            ctx, "deal.update", ENTITY, validated.id,
            validated.model_dump(mode="json", exclude_unset=True)
        )

        if next_status == DealStatus.CLOSED_WIN:
            self._sync_gained_property(next_property_id, next_deal_type)

        lost_win = current.status == DealStatus.CLOSED_WIN and (
            next_status != DealStatus.CLOSED_WIN or next_property_id != current.property_id
        )
        if lost_win:
            self._recompute_quietly(current.property_id)

        logger.info(
            f"Сделка {validated.id} обновлена: status {current.status.value} -> {next_status.value}, "
            f"property {current.property_id} -> {next_property_id}"
        )
        return ActionResult.ok(updated)

    def delete_deal(self, ctx: Optional[AuthContext], deal_id: str, lead_id: Optional[str] = None) -> ActionResult:
        """Удаление сделки; удаление выигранной сделки пересчитывает её объект"""
        try:
            assert_authenticated(ctx)
            if not deal_id:
                raise ValidationError("deal_id is required")
            assert_staff(ctx, self.staff_roles)

            existing = self.deal_repo.get_deal(deal_id)
            if existing is None:
                raise NotFoundError("Deal", deal_id)

            if not self.deal_repo.delete_deal(deal_id):
                raise NotFoundError("Deal", deal_id)
        except NavigationSignal:
            raise
        except PipelineError as e:
            logger.warning(f"Сделка {deal_id} не удалена: {e.message}")
            return ActionResult.fail(e.message)
        except Exception as e:
            logger.error(f"Ошибка при удалении сделки {deal_id}: {e}", exc_info=True)
            return ActionResult.fail("Failed to delete deal")

        self.audit.log(ctx, "deal.delete", ENTITY, deal_id, {"lead_id": lead_id})

        if existing.status == DealStatus.CLOSED_WIN:
            self._recompute_quietly(existing.property_id)

        logger.info(f"Сделка {deal_id} удалена (лид {lead_id})")
        return ActionResult.ok()

    # ------------------------------------------------------------------
    # Чтение
    # ------------------------------------------------------------------

    def get_deal(self, ctx: Optional[AuthContext], deal_id: str) -> ActionResult:
        return self._read(ctx, lambda: self.deal_repo.get_deal(deal_id), not_found="Deal not found")

    def list_deals_for_lead(self, ctx: Optional[AuthContext], lead_id: str) -> ActionResult:
        return self._read(ctx, lambda: self.deal_repo.list_by_lead(lead_id))

    def list_deals_for_property(self, ctx: Optional[AuthContext], property_id: str) -> ActionResult:
        return self._read(ctx, lambda: self.deal_repo.list_by_property(property_id))

    def _read(self, ctx, loader, not_found: Optional[str] = None) -> ActionResult:
        try:
            assert_staff(ctx, self.staff_roles)
            data = loader()
        except PipelineError as e:
            return ActionResult.fail(e.message)
        if data is None and not_found:
            return ActionResult.fail(not_found)
        return ActionResult.ok(data)

    # ------------------------------------------------------------------
    # Вспомогательные методы
    # ------------------------------------------------------------------

    @staticmethod
    def _build_create_fields(validated: CreateDealInput, user_id: str) -> Dict[str, Any]:
        """Поля для INSERT: без виртуального duration_months и без пустых значений"""
        fields = validated.model_dump(exclude={"duration_months"})
        if (
            validated.deal_type == DealType.RENT
            and validated.transaction_date
            and validated.duration_months
        ):
            fields["transaction_end_date"] = add_months(validated.transaction_date, validated.duration_months)

        fields = {key: value for key, value in fields.items() if value is not None}
        fields["created_by"] = user_id
        return fields

    def _sync_gained_property(self, property_id: str, deal_type: DealType) -> None:
        """Синхронизация объекта, по которому сделка стала выигранной"""
        try:
            if self.gain_strategy == self.GAIN_DIRECT:
                self.projector.apply_winning_deal(property_id, deal_type)
            else:
                self.projector.recompute(property_id)
        except PersistenceError as e:
            logger.error(f"Не удалось обновить статус объекта {property_id} после выигрыша сделки: {e}")

    def _recompute_quietly(self, property_id: str) -> None:
        """Пересчёт объекта, потерявшего выигранную сделку"""
        try:
            self.projector.recompute(property_id)
        except PersistenceError as e:
            logger.error(f"Не удалось пересчитать статус объекта {property_id}: {e}")
