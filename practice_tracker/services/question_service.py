import logging
from typing import List, Optional

from sqlalchemy import delete
from sqlmodel import Session, select

from practice_tracker.models import Question, QuestionType, Difficulty, UserProgress
from practice_tracker.schemas.question_schema import QuestionRequest
from practice_tracker.utils.errors import NotFoundError
from practice_tracker.utils.utils import Platform

logger = logging.getLogger(__name__)


def create_question(db: Session, question_req: QuestionRequest) -> Question:
    question = Question(**question_req.model_dump())
    db.add(question)
    db.commit()
    db.refresh(question)
    logger.info("New question added with ID: %s", question.id)
    return question


def get_question(db: Session, question_id: int) -> Question:
    question = db.get(Question, question_id)
    if not question:
        raise NotFoundError("Question not found")
    return question


def list_questions(db: Session, type: Optional[QuestionType] = None,
                   difficulty: Optional[Difficulty] = None) -> List[Question]:
    statement = select(Question)
    if type is not None:
        statement = statement.where(Question.type == type)
    if difficulty is not None:
        statement = statement.where(Question.difficulty == difficulty)
    statement = statement.order_by(Question.created_at.desc(), Question.id.desc())
    return db.exec(statement).all()


def list_questions_for_platform(db: Session, platform: Platform) -> List[Question]:
    return [q for q in db.exec(select(Question).order_by(Question.id)).all() if q.platform == platform]


def update_question(db: Session, question_id: int, question_req: QuestionRequest) -> Question:
    question = get_question(db, question_id)
    for key, value in question_req.model_dump().items():
        setattr(question, key, value)
    db.add(question)
    db.commit()
    db.refresh(question)
    logger.info("Question with ID %s updated", question_id)
    return question


def delete_question(db: Session, question_id: int) -> None:
    question = get_question(db, question_id)
    db.exec(delete(UserProgress).where(UserProgress.question_id == question_id))
    db.delete(question)
    db.commit()
    logger.info("Question with ID %s deleted", question_id)
