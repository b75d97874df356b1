"""
Схемы входных данных сделок (pydantic)
"""

import calendar
from datetime import date
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from core.exceptions import ValidationError
from modules.crm.deals.models import DealStatus, DealType

# Необязательные поля, пустая строка в которых означает "не задано"
OPTIONAL_TEXT_KEYS = (
    "transaction_date",
    "transaction_end_date",
    "co_agent_name",
    "co_agent_contact",
    "co_agent_online",
    "source",
)

# При обновлении None в этих полях означает "оставить прежнее значение"
NON_NULLABLE_KEYS = ("lead_id", "property_id", "deal_type", "status")


class CreateDealInput(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    lead_id: str = Field(min_length=1)
    property_id: str = Field(min_length=1)
    deal_type: DealType
    status: DealStatus = DealStatus.NEGOTIATING
    commission_amount: Optional[float] = Field(default=None, ge=0)
    transaction_date: Optional[date] = None
    transaction_end_date: Optional[date] = None
    duration_months: Optional[int] = Field(default=None, ge=1, le=600)
    co_agent_name: Optional[str] = None
    co_agent_contact: Optional[str] = None
    co_agent_online: Optional[str] = None
    source: Optional[str] = None


class UpdateDealInput(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    id: str = Field(min_length=1)
    lead_id: Optional[str] = Field(default=None, min_length=1)
    property_id: Optional[str] = Field(default=None, min_length=1)
    deal_type: Optional[DealType] = None
    status: Optional[DealStatus] = None
    commission_amount: Optional[float] = Field(default=None, ge=0)
    transaction_date: Optional[date] = None
    transaction_end_date: Optional[date] = None
    duration_months: Optional[int] = Field(default=None, ge=1, le=600)
    co_agent_name: Optional[str] = None
    co_agent_contact: Optional[str] = None
    co_agent_online: Optional[str] = None
    source: Optional[str] = None


def _format_errors(error: PydanticValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "input"
        parts.append(f"{location}: {item.get('msg')}")
    return "; ".join(parts)


def _strip_empty(payload: Mapping[str, Any], drop_none: tuple) -> Dict[str, Any]:
    """Удаление пустых строк в необязательных полях и None в указанных ключах"""
    cleaned = dict(payload)
    for key in OPTIONAL_TEXT_KEYS:
        if cleaned.get(key) == "":
            del cleaned[key]
    for key in drop_none:
        if key in cleaned and cleaned[key] is None:
            del cleaned[key]
    return cleaned


def parse_create_input(payload: Mapping[str, Any]) -> CreateDealInput:
    """
    Проверка данных новой сделки

    Raises:
        ValidationError: некорректная структура или значения
    """
    if not isinstance(payload, Mapping):
        raise ValidationError("Deal data must be an object")
    cleaned = _strip_empty(payload, drop_none=OPTIONAL_TEXT_KEYS + NON_NULLABLE_KEYS)
    try:
        return CreateDealInput.model_validate(cleaned)
    except PydanticValidationError as e:
        raise ValidationError(_format_errors(e), errors=e.errors()) from e


def parse_update_input(payload: Mapping[str, Any]) -> UpdateDealInput:
    """
    Проверка данных частичного обновления сделки

    Явный None в nullable поле очищает колонку; пустая строка игнорируется.
    """
    if not isinstance(payload, Mapping):
        raise ValidationError("Deal data must be an object")
    cleaned = _strip_empty(payload, drop_none=NON_NULLABLE_KEYS)
    try:
        return UpdateDealInput.model_validate(cleaned)
    except PydanticValidationError as e:
        raise ValidationError(_format_errors(e), errors=e.errors()) from e


def add_months(start: date, months: int) -> date:
    """Прибавление календарных месяцев с прижатием к концу месяца (31.01 + 1 = 28/29.02)"""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return start.replace(year=year, month=month, day=day)
