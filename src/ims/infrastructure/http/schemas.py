"""Request bodies for the HTTP API.

Numbers may arrive as JSON numbers or strings. Range and format checks
happen in the domain, so API and CLI report the same messages.
"""

from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel, StrictFloat, StrictInt, StrictStr

NumberLike = Optional[Union[StrictInt, StrictFloat, StrictStr]]


class MovementReq(BaseModel):
    type: Optional[StrictStr] = None
    item_id: Optional[StrictStr] = None
    quantity: NumberLike = None
    minimum_quantity: NumberLike = None
    responsible: Optional[StrictStr] = None
    sector: Optional[StrictStr] = None
    ticket_number: Optional[StrictStr] = None
    notes: Optional[StrictStr] = None
    occurred_at: Optional[StrictStr] = None


class RegisterInflowReq(BaseModel):
    name: Optional[StrictStr] = None
    category: Optional[StrictStr] = None
    unit: Optional[StrictStr] = None
    quantity: NumberLike = None
    minimum_quantity: NumberLike = None
    notes: Optional[StrictStr] = None


class CreateItemReq(BaseModel):
    name: Optional[StrictStr] = None
    category: Optional[StrictStr] = None
    unit: Optional[StrictStr] = None
    quantity: NumberLike = None
    minimum_quantity: NumberLike = None
    description: Optional[StrictStr] = None
    supplier: Optional[StrictStr] = None
    price: NumberLike = None
    location: Optional[StrictStr] = None


class EntryReq(BaseModel):
    item_id: Optional[StrictStr] = None
    item_name: Optional[StrictStr] = None
    system_quantity: NumberLike = None
    counted_quantity: NumberLike = None
    classification: Optional[StrictStr] = None


class ReconciliationReq(BaseModel):
    month: NumberLike = None
    year: NumberLike = None
    started_at: Optional[StrictStr] = None
    ended_at: Optional[StrictStr] = None
    entries: List[EntryReq] = []
