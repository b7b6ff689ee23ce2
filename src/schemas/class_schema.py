"""Class, invitation and solution schema definitions."""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ClassInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    teacher_id: str
    created_at: Optional[str] = None


class CreateClassRequest(BaseModel):
    name: str


class ClassInvitationInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    class_id: str
    invitation_code: str
    created_by: str
    expires_at: Optional[str] = None
    is_active: bool
    max_uses: Optional[int] = None
    current_uses: int
    created_at: Optional[str] = None
    status: Optional[str] = None


class CreateInvitationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    expires_at: Optional[str] = Field(default=None, alias="expiresAt")
    max_uses: Optional[int] = Field(default=None, ge=1, alias="maxUses")


class UpdateInvitationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_active: bool = Field(alias="isActive")


class JoinClassRequest(BaseModel):
    code: str


class AddSolutionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    student_id: str = Field(alias="studentId")
    solved_questions: int = Field(ge=0, alias="solvedQuestions")


class UpdateSolutionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    solved_questions: int = Field(ge=0, alias="solvedQuestions")


class Solution(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    class_id: str
    date: str
    solved_questions: int


class BestDay(BaseModel):
    date: str
    count: int


class StudentRankingInfo(BaseModel):
    student_id: str
    student_name: str
    total: int
    last_week_total: int
    previous_week_total: int
    change_percentage: int
    best_day: Optional[BestDay] = None


class RankingResponse(BaseModel):
    rankings: List[StudentRankingInfo]
    weekly_best: Optional[StudentRankingInfo] = None


class ChartResponse(BaseModel):
    rows: List[Dict[str, object]]
