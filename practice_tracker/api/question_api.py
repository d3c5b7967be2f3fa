from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from practice_tracker.auth.auth_handler import require_admin
from practice_tracker.configs.database import get_db
from practice_tracker.models import QuestionType, Difficulty
from practice_tracker.schemas.question_schema import QuestionMutationResponse, QuestionRequest, QuestionResponse
from practice_tracker.services import question_service

router = APIRouter(prefix="/questions", tags=["questions"])


@router.get("", response_model=List[QuestionResponse])
def list_questions(db: Session = Depends(get_db)):
    return [QuestionResponse.model_validate(q) for q in question_service.list_questions(db)]


@router.get("/filter", response_model=List[QuestionResponse])
def filter_questions(type: Optional[QuestionType] = None, difficulty: Optional[Difficulty] = None,
                     db: Session = Depends(get_db)):
    questions = question_service.list_questions(db, type=type, difficulty=difficulty)
    return [QuestionResponse.model_validate(q) for q in questions]


@router.get("/{question_id}", response_model=QuestionResponse)
def get_question(question_id: int, db: Session = Depends(get_db)):
    return QuestionResponse.model_validate(question_service.get_question(db, question_id))


@router.post("", response_model=QuestionMutationResponse, status_code=status.HTTP_201_CREATED)
def create_question(question_req: QuestionRequest, db: Session = Depends(get_db), _admin=Depends(require_admin)):
    question = question_service.create_question(db, question_req)
    return QuestionMutationResponse(id=question.id, message="Question submitted successfully!")


@router.put("/{question_id}", response_model=QuestionMutationResponse)
def update_question(question_id: int, question_req: QuestionRequest, db: Session = Depends(get_db),
                    _admin=Depends(require_admin)):
    question_service.update_question(db, question_id, question_req)
    return QuestionMutationResponse(id=question_id, message="Question updated successfully!")


@router.delete("/{question_id}", response_model=QuestionMutationResponse)
def delete_question(question_id: int, db: Session = Depends(get_db), _admin=Depends(require_admin)):
    question_service.delete_question(db, question_id)
    return QuestionMutationResponse(id=question_id, message="Question deleted successfully!")
