"""
SQLAlchemy models. Import here so Alembic and app can use them.
"""
from proximos.models.user import User, UserRole
from proximos.models.topic import Topic
from proximos.models.question import Question, QuestionOption, QuestionFeedback, QuestionType
from proximos.models.library import VideoLesson, Handout, ExerciseList, SimulatedExam
from proximos.models.group import Group, GroupMember, MemberRole
from proximos.models.activity import Activity, ActivityItem, ContentKind, ContentRef
from proximos.models.submission import QuestionSubmission

__all__ = [
    "User", "UserRole", "Topic", "Question", "QuestionOption", "QuestionFeedback", "QuestionType",
    "VideoLesson", "Handout", "ExerciseList", "SimulatedExam", "Group", "GroupMember", "MemberRole",
    "Activity", "ActivityItem", "ContentKind", "ContentRef", "QuestionSubmission",
]
