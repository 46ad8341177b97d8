from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class CreateMatchRequest(BaseModel):
    player_name: str = Field(min_length=1, max_length=32)


class JoinMatchRequest(BaseModel):
    player_name: str = Field(min_length=1, max_length=32)


class PlayerRequest(BaseModel):
    player_id: str


class RollRequest(BaseModel):
    player_id: str
    dice: Optional[List[int]] = Field(default=None, min_length=1, max_length=2)
    dice_count: int = Field(default=1, ge=1, le=2)


class PurchaseRequest(BaseModel):
    player_id: str
    card: str


class SeatResponse(BaseModel):
    match_code: str
    player_id: str
    snapshot: Dict[str, Any]


class IncomeEffectDTO(BaseModel):
    category: str
    color: str
    source_player_id: str
    target_player_id: Optional[str] = None
    card_name: str
    amount: int


class RollResponse(BaseModel):
    dice: List[int]
    total: int
    is_double: bool
    income: List[IncomeEffectDTO] = Field(default_factory=list)
    balances: Dict[str, int] = Field(default_factory=dict)


class PurchaseResponse(BaseModel):
    card: str
    card_name: str
    price: int
    coins: int
    is_landmark: bool
    has_won: bool


class EndTurnResponse(BaseModel):
    bonus_turn: bool
    current_player_id: str
    current_player_index: int
    turn: int


class LeaveResponse(BaseModel):
    match_code: str
    match_closed: bool


class ErrorResponse(BaseModel):
    error: str
    detail: str


class ActionMessage(BaseModel):
    action_type: str
    params: Dict[str, Any] = Field(default_factory=dict)
